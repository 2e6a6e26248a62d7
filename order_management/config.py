"""Configuration for the Order Management Service."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Order management service configuration.

    All settings can be overridden via environment variables. Values are
    read once at process start.
    """

    # Service configuration
    SERVICE_NAME: str = Field(default="order-management-service")
    SERVICE_VERSION: str = Field(default="1.0.0")
    SERVICE_HOST: str = Field(default="0.0.0.0")
    SERVICE_PORT: int = Field(default=8000, ge=1, le=65535)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    LOG_JSON: bool = Field(default=True)

    # Dataverse connection (e.g. https://orgname.crm.dynamics.com)
    DATAVERSE_URL: str = Field(default="")
    DATAVERSE_CLIENT_ID: str = Field(default="")
    DATAVERSE_CLIENT_SECRET: str = Field(default="")
    DATAVERSE_TENANT_ID: str = Field(default="")
    DATAVERSE_API_VERSION: str = Field(default="v9.2")
    DATAVERSE_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    DATAVERSE_AUTHORITY_HOST: str = Field(default="https://login.microsoftonline.com")

    # CORS
    CORS_ORIGINS: str = Field(default="*")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
