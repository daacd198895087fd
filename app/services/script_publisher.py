from typing import Any, Dict, List, Optional
import logging

from app.core.exceptions import PublishError
from app.external.cloudflare_client import CloudflareClient, CloudflareAPIError

logger = logging.getLogger(__name__)


def module_file_name(worker_name: str) -> str:
    return f"{worker_name}.mjs"


class ScriptPublisher:
    """Upload, remplacement et suppression des scripts d'un namespace"""

    def __init__(self, client: CloudflareClient):
        self.client = client

    def build_metadata(self, worker_name: str,
                       bindings: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"main_module": module_file_name(worker_name)}
        # Les bindings sont transmis tels quels, la plateforme les valide
        if bindings is not None:
            metadata["bindings"] = bindings
        return metadata

    def publish(self, namespace: str, worker_name: str, script_content: str,
                bindings: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Publie le module du worker; remplace tout script existant du même nom"""
        metadata = self.build_metadata(worker_name, bindings)
        try:
            result = self.client.upload_script(
                namespace,
                worker_name,
                metadata=metadata,
                files={module_file_name(worker_name): script_content},
            )
        except CloudflareAPIError as e:
            raise PublishError(worker_name, str(e)) from e

        logger.info(f"Script '{worker_name}' publié dans '{namespace}'")
        return result or {}

    def remove(self, namespace: str, worker_name: str) -> None:
        """Supprime le script du namespace (le namespace est conservé)"""
        try:
            self.client.delete_script(namespace, worker_name)
        except CloudflareAPIError as e:
            raise PublishError(worker_name, str(e)) from e

        logger.info(f"Script '{worker_name}' supprimé de '{namespace}'")
