from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env.

    Notes:
        - Secrets and DSNs must be provided via environment variables.
        - No insecure defaults are shipped; application will fail-fast if missing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        protected_namespaces=()
    )

    ENV: str = Field(..., description="Deployment environment, e.g. dev/staging/prod")
    SERVICE_NAME: str = Field(default="alumni-portal", description="Service name")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    DATABASE_URL: str = Field(..., description="SQLAlchemy async DSN, e.g. postgresql+asyncpg://...")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    IDENTITY_API_URL: str = Field(default="https://api.clerk.com/v1", description="Identity provider backend API")
    IDENTITY_API_KEY: str = Field(..., description="Identity provider secret key (must be provided)")
    IDENTITY_TIMEOUT_SEC: float = Field(default=10.0, description="Identity provider request timeout")

    JWT_PUBLIC_KEY: str = Field(..., description="Session token public key (must be provided)")
    OIDC_AUDIENCE: str = Field(..., description="Session token audience")

    KAFKA_BOOTSTRAP: str | None = Field(default=None, description="Kafka bootstrap servers; unset logs only")
    INVALIDATION_TOPIC: str = Field(default="portal.view-invalidations", description="View invalidation topic")

    FRONTEND_ORIGINS: str = Field(default="", description="Comma-separated CORS origins")


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance."""
    return Settings()
