from typing import Any, Dict
import logging

from app.core.exceptions import NamespaceProvisionError
from app.external.cloudflare_client import CloudflareClient, CloudflareAPIError

logger = logging.getLogger(__name__)


class NamespaceProvisioner:
    """Garantit l'existence d'un namespace de dispatch avant usage"""

    def __init__(self, client: CloudflareClient):
        self.client = client

    def ensure(self, namespace: str) -> Dict[str, Any]:
        """Recherche le namespace puis le crée s'il est absent.

        Une création rejetée parce que le namespace existe déjà (création
        concurrente) est traitée comme un succès.
        """
        try:
            found = self.client.get_namespace(namespace)
            logger.debug(f"Namespace '{namespace}' déjà présent")
            return found or {"name": namespace}
        except CloudflareAPIError as lookup_error:
            # Toute erreur de recherche déclenche une tentative de création
            if lookup_error.is_not_found:
                logger.info(f"Namespace '{namespace}' introuvable, création")
            else:
                logger.warning(f"Recherche du namespace '{namespace}' en échec ({lookup_error}), tentative de création")

        try:
            created = self.client.create_namespace(namespace)
            logger.info(f"Namespace '{namespace}' créé")
            return created or {"name": namespace}
        except CloudflareAPIError as e:
            if e.is_conflict:
                logger.info(f"Namespace '{namespace}' créé entre-temps par un autre appel")
                return {"name": namespace}
            raise NamespaceProvisionError(namespace, f"Unable to provision namespace '{namespace}': {e}") from e
