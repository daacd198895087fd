from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator
from sqlalchemy.orm import Session
from fastapi import Depends

from app.config import settings
from app.core.database import get_db, get_db_manager
from app.core.events import DeploymentEventEmitter
from app.external.cloudflare_client import CloudflareClient
from app.repositories.deployment_repository import WorkerDeploymentRepository
from app.repositories.server_repository import McpServerRepository
from app.services.deployment_reconciler import DeploymentReconciler
from app.services.namespace_provisioner import NamespaceProvisioner
from app.services.script_publisher import ScriptPublisher
from app.workers.reconciliation_worker import ReconciliationWorker


# === CLIENTS EXTERNES ===
@lru_cache()
def get_cloudflare_client() -> CloudflareClient:
    return CloudflareClient(
        api_token=settings.CLOUDFLARE_API_TOKEN,
        account_id=settings.CLOUDFLARE_ACCOUNT_ID,
        base_url=settings.CLOUDFLARE_API_BASE_URL,
        timeout=settings.CLOUDFLARE_TIMEOUT_SECONDS
    )


@lru_cache()
def get_event_emitter() -> DeploymentEventEmitter:
    return DeploymentEventEmitter()


# === REPOSITORIES ===
def get_deployment_repository(db: Session = Depends(get_db)) -> WorkerDeploymentRepository:
    """Factory pour le ledger des déploiements"""
    return WorkerDeploymentRepository(db)


def get_server_repository(db: Session = Depends(get_db)) -> McpServerRepository:
    """Factory pour le repository des serveurs MCP"""
    return McpServerRepository(db)


# === SERVICES ===
def get_namespace_provisioner() -> NamespaceProvisioner:
    return NamespaceProvisioner(get_cloudflare_client())


def get_script_publisher() -> ScriptPublisher:
    return ScriptPublisher(get_cloudflare_client())


def build_deployment_reconciler(
        deployment_repo: WorkerDeploymentRepository,
        server_repo: McpServerRepository
) -> DeploymentReconciler:
    return DeploymentReconciler(
        deployment_repository=deployment_repo,
        server_repository=server_repo,
        provisioner=get_namespace_provisioner(),
        publisher=get_script_publisher(),
        namespace=settings.DISPATCH_NAMESPACE,
        workers_domain=settings.WORKERS_DOMAIN,
        events=get_event_emitter()
    )


def get_deployment_reconciler(
        deployment_repo: WorkerDeploymentRepository = Depends(get_deployment_repository),
        server_repo: McpServerRepository = Depends(get_server_repository)
) -> DeploymentReconciler:
    """Factory pour le réconciliateur, une session par requête"""
    return build_deployment_reconciler(deployment_repo, server_repo)


@contextmanager
def reconciler_session() -> Iterator[DeploymentReconciler]:
    """Réconciliateur hors requête HTTP (worker), avec sa propre session"""
    db = get_db_manager().get_session()
    try:
        yield build_deployment_reconciler(WorkerDeploymentRepository(db), McpServerRepository(db))
    finally:
        db.close()


# === WORKERS ===
_reconciliation_worker_instance = None


def get_reconciliation_worker() -> ReconciliationWorker:
    """Factory pour le worker de réconciliation (singleton)"""
    global _reconciliation_worker_instance
    if _reconciliation_worker_instance is None:
        _reconciliation_worker_instance = ReconciliationWorker(
            reconciler_session,
            interval_seconds=settings.RECONCILE_INTERVAL_SECONDS,
            stale_after_seconds=settings.STALE_DEPLOYMENT_SECONDS
        )
    return _reconciliation_worker_instance


def reset_reconciliation_worker():
    """Réinitialise le singleton du worker (tests)"""
    global _reconciliation_worker_instance
    _reconciliation_worker_instance = None
