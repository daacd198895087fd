import asyncio
import logging
from typing import Any, Callable, ContextManager, Dict

from app.core.identifiers import utcnow
from app.services.deployment_reconciler import DeploymentReconciler

logger = logging.getLogger(__name__)

ReconcilerFactory = Callable[[], ContextManager[DeploymentReconciler]]


class ReconciliationWorker:
    """Passe périodique sur les déploiements restés en 'deploying'"""

    def __init__(self, reconciler_factory: ReconcilerFactory,
                 interval_seconds: int = 600, stale_after_seconds: int = 900):
        self.reconciler_factory = reconciler_factory
        self.interval_seconds = interval_seconds
        self.stale_after_seconds = stale_after_seconds
        self.running = False
        self._task = None
        self.last_run: Dict[str, Any] = {
            "timestamp": None,
            "reconciled": [],
            "error": None
        }

    async def start(self):
        """Démarre la boucle de réconciliation"""
        if self.running:
            return

        self.running = True
        logger.info("Worker de réconciliation démarré")

        while self.running:
            try:
                await asyncio.to_thread(self.run_once)
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                logger.info("Worker de réconciliation annulé")
                break
            except Exception as e:
                logger.error(f"Erreur dans la boucle de réconciliation: {e}")
                if self.running:
                    await asyncio.sleep(self.interval_seconds)

        logger.info("Worker de réconciliation arrêté")

    def stop(self):
        """Arrête le worker"""
        self.running = False

    def is_healthy(self) -> bool:
        return self.running and self._task is not None and not self._task.done()

    def run_once(self) -> Dict[str, Any]:
        """Exécute une passe avec une session dédiée"""
        with self.reconciler_factory() as reconciler:
            result = reconciler.reconcile_stale_deployments(self.stale_after_seconds)

        self.last_run = {
            "timestamp": utcnow().isoformat(),
            "reconciled": result.get("reconciled", []),
            "error": result.get("error")
        }
        if result.get("count"):
            logger.info(f"{result['count']} déploiement(s) interrompu(s) passé(s) en échec")
        return result
