"""
Shared configuration management for the Aplos token sidecar.
"""

from typing import ClassVar, List

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ALLOWED_NETWORKS = "127.0.0.0/8,::1/128,10.0.0.0/8,172.16.0.0/12,192.168.0.0/16"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Unaliased fields read ``SIDECAR_<FIELD>``; vendor settings keep the
    ``APLOS_*`` names the main application already uses.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIDECAR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="production")
    log_level: str = Field(default="info")

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.lower()
        if level not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError(f"Unsupported log level: {v}")
        return level


class SidecarConfig(BaseConfig):
    """Sidecar-specific configuration."""

    service_name: ClassVar[str] = "aplos-sidecar"

    # Aplos vendor API
    aplos_api_base_url: str = Field(
        default="https://app.aplos.com/hermes/api/v1",
        validation_alias="APLOS_API_BASE_URL",
    )
    aplos_client_id: str = Field(default="", validation_alias="APLOS_CLIENT_ID")
    aplos_private_key: SecretStr = Field(default=SecretStr(""), validation_alias="APLOS_PRIVATE_KEY")
    aplos_auth_timeout: float = Field(default=30.0, gt=0, validation_alias="APLOS_AUTH_TIMEOUT")

    # Request handling
    max_body_bytes: int = Field(default=16384, ge=1)

    # Security
    allowed_networks: str = Field(default=DEFAULT_ALLOWED_NETWORKS)
    auth_token: SecretStr = Field(default=SecretStr(""))

    # Rate limiting
    rate_limit_max_requests: int = Field(default=60, ge=0)
    rate_limit_window_seconds: float = Field(default=60.0, gt=0)

    @property
    def allowed_network_list(self) -> List[str]:
        """Allow-list entries, split from the comma-separated setting."""
        return [item.strip() for item in self.allowed_networks.split(",") if item.strip()]


def get_config(**overrides) -> SidecarConfig:
    """Get sidecar configuration, with optional explicit overrides."""
    return SidecarConfig(**overrides)
