from typing import Optional
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.mcp_server import McpServer


class McpServerRepository(BaseRepository[McpServer]):
    def __init__(self, db: Session):
        super().__init__(McpServer, db)

    def mark_worker_active(self, server_id: str, worker_name: str) -> Optional[McpServer]:
        """Associe le worker publié au serveur et le passe en 'active'"""
        return self.update(server_id, {"worker_name": worker_name, "status": "active"})
