"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "Inkwell"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite accepted for local runs)
    database_url: str = "postgresql+psycopg://localhost:5432/inkwell_dev"
    db_connect_timeout: int = 10  # seconds
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle: int = 1800  # seconds

    # Security
    secret_key: str = ""
    access_token_expire_hours: int = 24
    refresh_token_expire_days: int = 30

    # Background worker pool
    worker_pool_size: int = 4
    worker_task_timeout: float = 30.0
    shutdown_timeout: float = 10.0

    # Object storage (S3 / MinIO)
    storage_endpoint_url: str = ""
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_bucket: str = "inkwell-bucket"
    storage_region: str = "us-east-1"
    storage_use_ssl: bool = False
    storage_public_base_url: str = ""

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = _env_bool("DEBUG")

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'inkwell_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))
        self.db_pool_size = int(os.getenv("DB_POOL_SIZE", str(self.db_pool_size)))
        self.db_max_overflow = int(os.getenv("DB_MAX_OVERFLOW", str(self.db_max_overflow)))
        self.db_pool_recycle = int(os.getenv("DB_POOL_RECYCLE", str(self.db_pool_recycle)))

        # JWT_SECRET kept as an alias for older deployments
        self.secret_key = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET", "")
        self.access_token_expire_hours = int(
            os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", str(self.access_token_expire_hours))
        )
        self.refresh_token_expire_days = int(
            os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", str(self.refresh_token_expire_days))
        )

        self.worker_pool_size = int(os.getenv("WORKER_POOL_SIZE", str(self.worker_pool_size)))
        self.worker_task_timeout = float(
            os.getenv("WORKER_TASK_TIMEOUT", str(self.worker_task_timeout))
        )
        self.shutdown_timeout = float(os.getenv("SHUTDOWN_TIMEOUT", str(self.shutdown_timeout)))

        self.storage_endpoint_url = os.getenv("STORAGE_ENDPOINT_URL", "")
        self.storage_access_key = os.getenv("STORAGE_ACCESS_KEY", "")
        self.storage_secret_key = os.getenv("STORAGE_SECRET_KEY", "")
        self.storage_bucket = os.getenv("STORAGE_BUCKET", self.storage_bucket)
        self.storage_region = os.getenv("STORAGE_REGION", self.storage_region)
        self.storage_use_ssl = _env_bool("STORAGE_USE_SSL")
        self.storage_public_base_url = os.getenv("STORAGE_PUBLIC_BASE_URL", "")

    def validate(self) -> None:
        """Raise ValueError if settings required at startup are missing."""
        missing = []
        if not self.secret_key:
            missing.append("SECRET_KEY")
        if not self.database_url:
            missing.append("DATABASE_URL")
        if missing:
            raise ValueError(f"Missing required settings: {', '.join(missing)}")
