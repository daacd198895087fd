from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy import desc
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from app.repositories.base_repository import BaseRepository
from app.models.worker_deployment import WorkerDeployment, DeploymentStatus


class WorkerDeploymentRepository(BaseRepository[WorkerDeployment]):
    """Ledger des tentatives de déploiement"""

    def __init__(self, db: Session):
        super().__init__(WorkerDeployment, db)

    def create_deploying(self, deployment_id: str, worker_name: str, server_id: str,
                         namespace: str, script_content: str,
                         bindings: List[Dict[str, Any]],
                         created_at: Optional[datetime] = None) -> WorkerDeployment:
        """Insère l'enregistrement initial en statut 'deploying'"""
        data = {
            "id": deployment_id,
            "worker_name": worker_name,
            "server_id": server_id,
            "namespace": namespace,
            "script_content": script_content,
            "bindings": list(bindings),
            "status": DeploymentStatus.DEPLOYING,
        }
        if created_at is not None:
            data["created_at"] = created_at
        return self.create(data)

    def mark_active(self, deployment_id: str, deployed_at: datetime,
                    deployment_url: str) -> Optional[WorkerDeployment]:
        return self.update(deployment_id, {
            "status": DeploymentStatus.ACTIVE,
            "deployed_at": deployed_at,
            "deployment_url": deployment_url,
            "deployment_metadata": None,
        })

    def mark_failed(self, deployment_id: str, error: str) -> Optional[WorkerDeployment]:
        return self.update(deployment_id, {
            "status": DeploymentStatus.FAILED,
            "deployment_metadata": {"error": error},
        })

    def replace_script(self, deployment_id: str, script_content: str,
                       deployed_at: datetime) -> Optional[WorkerDeployment]:
        """Remplace le contenu après une mise à jour réussie, sans toucher au statut"""
        return self.update(deployment_id, {
            "script_content": script_content,
            "deployed_at": deployed_at,
        })

    def list_recent(self, limit: int = 100, offset: int = 0) -> List[WorkerDeployment]:
        """Page de déploiements, plus récemment déployés d'abord, jamais déployés en dernier"""
        try:
            return (self.db.query(WorkerDeployment)
                    .order_by(WorkerDeployment.deployed_at.is_(None),
                              desc(WorkerDeployment.deployed_at),
                              desc(WorkerDeployment.created_at),
                              WorkerDeployment.id)
                    .offset(offset)
                    .limit(limit)
                    .all())
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e

    def get_stale_deploying(self, older_than: datetime) -> List[WorkerDeployment]:
        """Enregistrements restés en 'deploying' depuis avant la date donnée"""
        try:
            return (self.db.query(WorkerDeployment)
                    .filter(WorkerDeployment.status == DeploymentStatus.DEPLOYING)
                    .filter(WorkerDeployment.created_at < older_than)
                    .all())
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e
