from .base import BaseModel
from .worker_deployment import WorkerDeployment, DeploymentStatus
from .mcp_server import McpServer

__all__ = ["BaseModel", "WorkerDeployment", "DeploymentStatus", "McpServer"]
