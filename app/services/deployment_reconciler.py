from typing import Any, Dict, List, Optional
from datetime import timedelta
import logging

from app.core.events import DeploymentEventEmitter
from app.core.exceptions import (
    DeploymentNotFoundError,
    LedgerError,
    ValidationError,
    error_message,
)
from app.core.identifiers import (
    Clock,
    IdGenerator,
    build_deployment_url,
    generate_deployment_id,
    utcnow,
)
from app.models.worker_deployment import WorkerDeployment
from app.repositories.deployment_repository import WorkerDeploymentRepository
from app.repositories.server_repository import McpServerRepository
from app.services.namespace_provisioner import NamespaceProvisioner
from app.services.script_publisher import ScriptPublisher

logger = logging.getLogger(__name__)

INTERRUPTED_ERROR = "Deployment interrupted before completion"


def failure(error: BaseException, **extra: Any) -> Dict[str, Any]:
    result = {"success": False, "error": error_message(error)}
    result.update(extra)
    return result


class DeploymentReconciler:
    """Machine à états des déploiements de workers.

    Garde cohérents le ledger local (WorkerDeploymentRepository) et le
    registre distant des namespaces/scripts. Chaque opération publique
    retourne un dictionnaire {"success": True, ...} ou
    {"success": False, "error": message}; aucune exception ne traverse
    cette frontière.

    Un déploiement insère toujours son enregistrement avant le moindre
    appel distant. Les effets distants partiels ne sont jamais annulés:
    les enregistrements bloqués en 'deploying' sont rattrapés par
    reconcile_stale_deployments().
    """

    def __init__(self,
                 deployment_repository: WorkerDeploymentRepository,
                 server_repository: McpServerRepository,
                 provisioner: NamespaceProvisioner,
                 publisher: ScriptPublisher,
                 namespace: str = "meta-mcp",
                 workers_domain: str = "workers.dev",
                 id_generator: IdGenerator = generate_deployment_id,
                 clock: Clock = utcnow,
                 events: Optional[DeploymentEventEmitter] = None):
        self.deployments = deployment_repository
        self.servers = server_repository
        self.provisioner = provisioner
        self.publisher = publisher
        self.namespace = namespace
        self.workers_domain = workers_domain
        self.id_generator = id_generator
        self.clock = clock
        self.events = events or DeploymentEventEmitter()

    def deployment_url(self, worker_name: str) -> str:
        return build_deployment_url(worker_name, self.namespace, self.workers_domain)

    def _require_record(self, deployment_id: str) -> WorkerDeployment:
        if not deployment_id:
            raise ValidationError("deploymentId is required")
        record = self.deployments.get_by_id(deployment_id)
        if record is None:
            raise DeploymentNotFoundError(deployment_id)
        return record

    # === DEPLOY ===

    def deploy_from_meta_mcp(self, server_id: str, worker_name: str, script_content: str,
                             bindings: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Déploie un worker dans le namespace de dispatch"""
        bindings = list(bindings) if bindings else []
        if not server_id:
            return failure(ValidationError("serverId is required"))
        if not worker_name:
            return failure(ValidationError("workerName is required"))

        deployment_id = self.id_generator()
        namespace = self.namespace

        try:
            self.deployments.create_deploying(
                deployment_id, worker_name, server_id, namespace, script_content or "", bindings,
                created_at=self.clock()
            )
        except Exception as e:
            self.events.emit("deployment.failed", deployment_id=deployment_id,
                             worker_name=worker_name, stage="ledger_insert", error=error_message(e))
            return failure(e)

        self.events.emit("deployment.started", deployment_id=deployment_id,
                         worker_name=worker_name, namespace=namespace, server_id=server_id)

        try:
            self.provisioner.ensure(namespace)
            self.publisher.publish(namespace, worker_name, script_content or "", bindings)
        except Exception as e:
            return self._record_deploy_failure(deployment_id, worker_name, e)

        deployment_url = self.deployment_url(worker_name)
        try:
            self.deployments.mark_active(deployment_id, self.clock(), deployment_url)
            if self.servers.mark_worker_active(server_id, worker_name) is None:
                logger.warning(f"Serveur '{server_id}' introuvable, worker '{worker_name}' non associé")
        except Exception as e:
            # Le script est publié mais le ledger ne le reflète pas. Si mark_active
            # a abouti, deployed_at et deployment_url restent renseignés sur la ligne en échec
            self.events.emit("deployment.ledger_out_of_sync", deployment_id=deployment_id,
                             worker_name=worker_name, error=error_message(e))
            return self._record_deploy_failure(deployment_id, worker_name, e)

        self.events.emit("deployment.succeeded", deployment_id=deployment_id,
                         worker_name=worker_name, deployment_url=deployment_url)
        return {
            "success": True,
            "deploymentId": deployment_id,
            "workerName": worker_name,
            "namespace": namespace,
            "deploymentUrl": deployment_url
        }

    def _record_deploy_failure(self, deployment_id: str, worker_name: str,
                               error: BaseException) -> Dict[str, Any]:
        message = error_message(error)
        self.events.emit("deployment.failed", deployment_id=deployment_id,
                         worker_name=worker_name, error=message)
        try:
            self.deployments.mark_failed(deployment_id, message)
        except LedgerError as ledger_error:
            logger.error(f"Impossible de marquer le déploiement {deployment_id} en échec: {ledger_error}")
        return failure(error, deploymentId=deployment_id)

    # === QUERY ===

    def list_deployments(self, limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        """Page de déploiements, les plus récemment déployés d'abord"""
        try:
            if limit is None or limit < 1:
                raise ValidationError("limit must be a positive integer")
            if offset is None or offset < 0:
                raise ValidationError("offset must be zero or positive")
            records = self.deployments.list_recent(limit=limit, offset=offset)
        except Exception as e:
            logger.error(f"Échec du listing des déploiements: {e}")
            return failure(e)

        deployments = [record.to_dict() for record in records]
        return {"success": True, "deployments": deployments, "count": len(deployments)}

    def get_deployment_status(self, deployment_id: str) -> Dict[str, Any]:
        try:
            record = self._require_record(deployment_id)
        except Exception as e:
            if not isinstance(e, ValidationError):
                logger.error(f"Échec de lecture du déploiement {deployment_id}: {e}")
            return failure(e)
        return {"success": True, "deployment": record.to_dict()}

    # === UPDATE ===

    def update_deployment(self, deployment_id: str, script_content: str) -> Dict[str, Any]:
        """Republie le code du worker; les bindings ne sont pas renvoyés"""
        try:
            record = self._require_record(deployment_id)
            worker_name = record.worker_name
            self.publisher.publish(record.namespace, worker_name, script_content or "")
        except Exception as e:
            if not isinstance(e, ValidationError):
                self.events.emit("deployment.update_failed", deployment_id=deployment_id,
                                 error=error_message(e))
            return failure(e)

        try:
            self.deployments.replace_script(deployment_id, script_content or "", self.clock())
        except Exception as e:
            self.events.emit("deployment.ledger_out_of_sync", deployment_id=deployment_id,
                             worker_name=worker_name, error=error_message(e))
            return failure(e)

        self.events.emit("deployment.updated", deployment_id=deployment_id, worker_name=worker_name)
        return {"success": True, "deploymentId": deployment_id, "workerName": worker_name}

    # === DELETE ===

    def delete_deployment(self, deployment_id: str) -> Dict[str, Any]:
        """Supprime le script distant puis, seulement en cas de succès, l'enregistrement"""
        try:
            record = self._require_record(deployment_id)
            worker_name = record.worker_name
            self.publisher.remove(record.namespace, worker_name)
        except Exception as e:
            if not isinstance(e, ValidationError):
                self.events.emit("deployment.delete_failed", deployment_id=deployment_id,
                                 error=error_message(e))
            return failure(e)

        try:
            self.deployments.delete(deployment_id)
        except Exception as e:
            self.events.emit("deployment.ledger_out_of_sync", deployment_id=deployment_id,
                             worker_name=worker_name, error=error_message(e))
            return failure(e)

        self.events.emit("deployment.deleted", deployment_id=deployment_id, worker_name=worker_name)
        return {"success": True, "deploymentId": deployment_id}

    # === RECONCILIATION ===

    def reconcile_stale_deployments(self, max_age_seconds: int) -> Dict[str, Any]:
        """Passe en 'failed' les enregistrements bloqués en 'deploying'"""
        try:
            threshold = self.clock() - timedelta(seconds=max_age_seconds)
            reconciled = []
            for record in self.deployments.get_stale_deploying(threshold):
                self.deployments.mark_failed(record.id, INTERRUPTED_ERROR)
                reconciled.append(record.id)
                self.events.emit("deployment.reconciled", deployment_id=record.id,
                                 worker_name=record.worker_name)
        except Exception as e:
            logger.error(f"Échec de la passe de réconciliation: {e}")
            return failure(e)

        return {"success": True, "reconciled": reconciled, "count": len(reconciled)}
