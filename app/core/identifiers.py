import uuid
from datetime import datetime, timezone
from typing import Callable

IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


def generate_deployment_id() -> str:
    """Identifiant opaque et unique d'un déploiement"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Le ledger stocke des dates UTC naïves (colonnes DateTime sans fuseau)
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_deployment_url(worker_name: str, namespace_label: str, domain: str) -> str:
    """URL publique d'un worker: https://{worker}.{namespace}.{domaine}"""
    return f"https://{worker_name}.{namespace_label}.{domain}"
