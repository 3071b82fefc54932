"""Configuration management for OAuth clients."""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..oauth.authority import AzureCloudInstance


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application registration
    client_id: str | None = Field(default=None, description="Application (client) ID")
    client_secret: str | None = Field(
        default=None, description="Client secret for confidential clients"
    )
    redirect_uri: str | None = Field(
        default=None, description="Redirect URI registered for the application"
    )

    # Authority
    tenant: str = Field(
        default="common",
        description="Tenant id or well-known authority (common, organizations, consumers)",
        validation_alias=AliasChoices("tenant", "tenant_id"),
    )
    cloud_instance: AzureCloudInstance = Field(
        default=AzureCloudInstance.AZURE_PUBLIC,
        description="Login host of the national or public cloud",
    )

    # Transport
    http_timeout: float = Field(
        default=30.0, description="Timeout in seconds for token endpoint requests"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("redirect_uri")
    @classmethod
    def validate_redirect_uri(cls, v: str | None) -> str | None:
        """Validate that redirect_uri is an absolute http(s) URL."""
        if v is None:
            return v
        if not v.startswith(("https://", "http://")):
            raise ValueError("Redirect URI must start with https:// or http://")
        return v

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeout must be positive")
        return v


# Global settings instance
settings = Settings()
