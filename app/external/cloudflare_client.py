import json
import logging
import requests
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MODULE_CONTENT_TYPE = "application/javascript+module"


class CloudflareAPIError(Exception):
    """Réponse en erreur de l'API Cloudflare (HTTP non 2xx ou success=false)"""

    def __init__(self, status_code: Optional[int], errors: List[Dict[str, Any]], message: str = None):
        self.status_code = status_code
        self.errors = errors or []
        if message is None:
            message = "; ".join(
                f"[{err.get('code')}] {err.get('message')}" if err.get("code") is not None else str(err.get("message"))
                for err in self.errors
            ) or f"Cloudflare API request failed with status {status_code}"
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_conflict(self) -> bool:
        if self.status_code == 409:
            return True
        return any("already exists" in str(err.get("message", "")).lower() for err in self.errors)


class CloudflareClient:
    """Client minimal de l'API Workers for Platforms (namespaces de dispatch)"""

    def __init__(self, api_token: str, account_id: str,
                 base_url: str = "https://api.cloudflare.com/client/v4",
                 timeout: float = 30.0, session: requests.Session = None):
        self.account_id = account_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_token}"})

    def _namespaces_url(self, *parts: str) -> str:
        path = "/".join([self.base_url, "accounts", self.account_id, "workers", "dispatch", "namespaces", *parts])
        return path

    def _request(self, method: str, url: str, **kwargs) -> Any:
        """Exécute la requête et déballe l'enveloppe {success, errors, result}"""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Erreur réseau Cloudflare {method} {url}: {e}")
            raise CloudflareAPIError(None, [], f"Cloudflare API unreachable: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok or not payload.get("success", response.ok):
            errors = payload.get("errors") or []
            logger.warning(f"Cloudflare {method} {url} -> HTTP {response.status_code}: {errors}")
            raise CloudflareAPIError(response.status_code, errors)

        return payload.get("result")

    def get_namespace(self, namespace: str) -> Dict[str, Any]:
        """Récupère un namespace de dispatch"""
        return self._request("GET", self._namespaces_url(namespace))

    def create_namespace(self, namespace: str) -> Dict[str, Any]:
        """Crée un namespace de dispatch"""
        return self._request("POST", self._namespaces_url(), json={"name": namespace})

    def upload_script(self, namespace: str, script_name: str, metadata: Dict[str, Any],
                      files: Dict[str, str]) -> Dict[str, Any]:
        """Upload (ou remplace) un script dans le namespace

        Args:
            metadata: métadonnées du worker (main_module, bindings...)
            files: nom de module -> contenu source
        """
        multipart = [("metadata", (None, json.dumps(metadata), "application/json"))]
        for file_name, content in files.items():
            multipart.append((file_name, (file_name, content.encode("utf-8"), MODULE_CONTENT_TYPE)))
        return self._request("PUT", self._namespaces_url(namespace, "scripts", script_name), files=multipart)

    def delete_script(self, namespace: str, script_name: str) -> Any:
        """Supprime un script du namespace"""
        return self._request("DELETE", self._namespaces_url(namespace, "scripts", script_name))
