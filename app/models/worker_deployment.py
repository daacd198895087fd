# app/models/worker_deployment.py
from sqlalchemy import Column, String, DateTime, Text, JSON, Enum
import enum

from .base import BaseModel


class DeploymentStatus(str, enum.Enum):
    DEPLOYING = "deploying"
    ACTIVE = "active"
    FAILED = "failed"


class WorkerDeployment(BaseModel):
    __tablename__ = "worker_deployments"

    id = Column(String(64), primary_key=True, index=True)

    # Worker ciblé
    worker_name = Column(String(255), nullable=False, index=True)
    server_id = Column(String(255), nullable=False, index=True)
    namespace = Column(String(255), nullable=False)

    # Dernier contenu connu et bindings
    script_content = Column(Text, nullable=False)
    bindings = Column(JSON, nullable=False, default=list)

    # Statut
    status = Column(
        Enum(DeploymentStatus, values_callable=lambda e: [member.value for member in e]),
        nullable=False,
        default=DeploymentStatus.DEPLOYING,
        index=True,
    )
    deployed_at = Column(DateTime, nullable=True)
    deployment_url = Column(String(512), nullable=True)

    # "metadata" est réservé par SQLAlchemy côté attribut
    deployment_metadata = Column("metadata", JSON, nullable=True)

    def __repr__(self):
        return f"<WorkerDeployment(id='{self.id}', worker='{self.worker_name}', status='{self.status}')>"

    @property
    def error(self):
        return (self.deployment_metadata or {}).get("error")

    def to_dict(self):
        """Convertit le modèle en dictionnaire (clés du format d'échange)"""
        status = self.status.value if isinstance(self.status, DeploymentStatus) else self.status
        return {
            "id": self.id,
            "workerName": self.worker_name,
            "serverId": self.server_id,
            "namespace": self.namespace,
            "scriptContent": self.script_content,
            "bindings": list(self.bindings or []),
            "status": status,
            "deployedAt": self.deployed_at.isoformat() if self.deployed_at else None,
            "deploymentUrl": self.deployment_url,
            "metadata": self.deployment_metadata,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None
        }
