from sqlalchemy import Column, String

from .base import BaseModel


class McpServer(BaseModel):
    __tablename__ = "mcp_servers"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    # Worker publié pour ce serveur
    worker_name = Column(String(255), nullable=True)
    status = Column(String(50), nullable=False, default="pending")  # pending, active, inactive

    def __repr__(self):
        return f"<McpServer(id='{self.id}', worker='{self.worker_name}', status='{self.status}')>"
