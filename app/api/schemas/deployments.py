from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class BindingDescriptor(BaseModel):
    """Binding transmis tel quel à la plateforme, qui le valide"""
    model_config = ConfigDict(extra="allow")

    type: str
    name: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class DeployRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    server_id: str = Field(..., alias="serverId", min_length=1)
    worker_name: str = Field(..., alias="workerName", min_length=1)
    script_content: str = Field(..., alias="scriptContent")
    bindings: List[BindingDescriptor] = Field(default_factory=list)


class UpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    script_content: str = Field(..., alias="scriptContent")


class DeploymentRecordResponse(BaseModel):
    id: str
    workerName: str
    serverId: str
    namespace: str
    scriptContent: str
    bindings: List[Dict[str, Any]]
    status: str
    deployedAt: Optional[str] = None
    deploymentUrl: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class DeployResponse(BaseModel):
    success: bool
    deploymentId: Optional[str] = None
    workerName: Optional[str] = None
    namespace: Optional[str] = None
    deploymentUrl: Optional[str] = None
    error: Optional[str] = None


class DeploymentListResponse(BaseModel):
    success: bool
    deployments: List[DeploymentRecordResponse] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None


class DeploymentStatusResponse(BaseModel):
    success: bool
    deployment: Optional[DeploymentRecordResponse] = None
    error: Optional[str] = None


class UpdateResponse(BaseModel):
    success: bool
    deploymentId: Optional[str] = None
    workerName: Optional[str] = None
    error: Optional[str] = None


class DeleteResponse(BaseModel):
    success: bool
    deploymentId: Optional[str] = None
    error: Optional[str] = None


class ReconcileResponse(BaseModel):
    success: bool
    reconciled: List[str] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None
