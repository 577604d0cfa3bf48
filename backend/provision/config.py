"""Application configuration"""
from typing import List, NamedTuple, Optional

from pydantic_settings import BaseSettings


class EngineConfig(NamedTuple):
    """Immutable engine configuration, passed into each engine component."""
    index_prefix: str
    hash_cost: int
    min_secret_length: int
    redact_msg: str


class Settings(BaseSettings):
    """Application settings"""

    # Document store
    STORE_BACKEND: str = "elastic"  # elastic or sql
    ELASTIC_SERVER: str = "http://elasticsearch:9200"
    ELASTIC_TIMEOUT: int = 10  # seconds
    SYSTEM_PREFIX: str = "system_"  # prefixes the user, account and asset indexes
    SEND_TEMPLATES: bool = True

    # SQL document store (local development and tests)
    DATABASE_URL: str = "sqlite:///./provision.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    # Secrets
    HASH_COST: int = 12
    MIN_SECRET_LENGTH: int = 10
    REDACT_MSG: str = "REDACTED"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8070
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["300/minute", "5000/hour"]
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    # JWT
    JWT_PRIVATE_KEY: Optional[str] = None   # RSA-2048 PEM string; auto-generated on startup if absent
    JWT_ALGORITHM: str = "RS256"
    JWT_EXPIRE_SECONDS: int = 28800         # 8 hours for user tokens
    JWT_KEY_ID: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def engine_config(self) -> EngineConfig:
        """Snapshot the settings the engine components are built from"""
        return EngineConfig(
            index_prefix=self.SYSTEM_PREFIX,
            hash_cost=self.HASH_COST,
            min_secret_length=self.MIN_SECRET_LENGTH,
            redact_msg=self.REDACT_MSG,
        )


settings = Settings()
