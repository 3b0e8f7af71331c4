import logging
from datetime import timedelta

from pydantic import model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

INSECURE_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./conduit.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Auth
    JWT_SECRET: str = INSECURE_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY: timedelta = timedelta(hours=72)

    # Comma-separated; empty means any origin.
    CORS_ALLOWED_ORIGINS: str = ""

    # Cache TTLs
    CACHE_TTL_TAGS: int = 300

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    model_config = {"env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _reject_insecure_secret(self) -> "Settings":
        if self.JWT_SECRET == INSECURE_JWT_SECRET:
            if self.is_production:
                raise ValueError("JWT_SECRET must be set to a secure value in production")
            logger.warning("using default JWT secret - not suitable for production")
        return self

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]


settings = Settings()
