"""
Shared configuration management for the SentinelFlow console gateway.
"""

from typing import Any

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


DEFAULT_CREDENTIAL_HEADER = "X-API-Key"
DEFAULT_MOUNT_PATH = "/api/sf"


class GatewayConfig(BaseSettings):
    """Process-wide gateway configuration.

    Built once at startup and handed to every component by reference. The
    model is frozen, so request handlers can read it concurrently without
    synchronisation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=AliasChoices("SF_ENV", "env"))
    log_level: str = Field(default="info", validation_alias=AliasChoices("SF_LOG_LEVEL", "log_level"))
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("SF_HOST", "host"))
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "port"))

    # Upstream
    api_base: str = Field(validation_alias=AliasChoices("API_BASE", "api_base"))
    api_key: SecretStr = Field(validation_alias=AliasChoices("API_KEY", "api_key"))
    credential_header: str = Field(
        default=DEFAULT_CREDENTIAL_HEADER,
        validation_alias=AliasChoices("SF_CREDENTIAL_HEADER", "credential_header"),
    )
    upstream_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("SF_UPSTREAM_TIMEOUT_SECONDS", "upstream_timeout_seconds"),
    )
    disconnect_poll_interval: float = Field(
        default=0.1,
        gt=0,
        validation_alias=AliasChoices("SF_DISCONNECT_POLL_INTERVAL", "disconnect_poll_interval"),
    )

    # Gateway surface
    mount_path: str = Field(
        default=DEFAULT_MOUNT_PATH,
        validation_alias=AliasChoices("SF_MOUNT_PATH", "mount_path"),
    )

    # Console (server-side rendering) layer
    internal_base: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("NEXT_INTERNAL_BASE", "internal_base"),
    )

    @field_validator("api_base", "internal_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base address must not be empty")
        return value

    @field_validator("api_key")
    @classmethod
    def _require_secret(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("credential must not be empty")
        return value

    @field_validator("mount_path")
    @classmethod
    def _normalise_mount(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        if value == "/":
            raise ValueError("mount path must not be the root path")
        return value


def load_config(**overrides: Any) -> GatewayConfig:
    """Build the gateway configuration, failing fast on missing values."""
    try:
        return GatewayConfig(**overrides)
    except PydanticValidationError as exc:
        # Only field names are reported; input values may hold the secret.
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise ConfigurationError(
            "Gateway configuration is missing or invalid",
            details={"fields": fields},
        ) from None
