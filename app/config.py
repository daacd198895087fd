from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging
from pathlib import Path

root_dir = Path(__file__).parent.parent
env_path = root_dir / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Worker Publisher API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Base de données (ledger des déploiements)
    DATABASE_URL: str = "sqlite:///./worker_publisher.db"

    # Cloudflare Workers for Platforms
    CLOUDFLARE_API_TOKEN: str = ""
    CLOUDFLARE_ACCOUNT_ID: str = ""
    CLOUDFLARE_API_BASE_URL: str = "https://api.cloudflare.com/client/v4"
    CLOUDFLARE_TIMEOUT_SECONDS: float = 30.0

    # Namespace de dispatch et domaine d'hébergement
    DISPATCH_NAMESPACE: str = "meta-mcp"
    WORKERS_DOMAIN: str = "workers.dev"

    # Worker de réconciliation
    RECONCILIATION_WORKER_ENABLED: bool = True
    RECONCILE_INTERVAL_SECONDS: int = 600
    STALE_DEPLOYMENT_SECONDS: int = 900

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"
        case_sensitive = True


try:
    settings = Settings()
except Exception as e:
    logger.error(f"Échec de la création des settings: {e}")
    raise
