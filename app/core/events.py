import logging
from typing import Any

logger = logging.getLogger("app.events")

# Niveau de log par défaut selon le suffixe de l'événement
_ERROR_SUFFIXES = ("failed", "out_of_sync")


class DeploymentEventEmitter:
    """Émet les événements du cycle de vie des déploiements via logging"""

    def __init__(self, event_logger: logging.Logger = None):
        self.logger = event_logger or logger

    def emit(self, event: str, **fields: Any) -> None:
        level = logging.ERROR if event.endswith(_ERROR_SUFFIXES) else logging.INFO
        details = " ".join(f"{key}={value}" for key, value in fields.items())
        self.logger.log(level, f"{event} {details}".strip(), extra={"event": event, "fields": fields})
