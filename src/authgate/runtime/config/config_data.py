"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
All models are frozen: the configuration is built once at startup and passed
explicitly to the services that need it.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.authgate.core.models.auth_mode import AuthenticationMode

DEFAULT_GUID_PATTERN = (
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class GuidValidationConfig(_FrozenModel):
    """Validation of self-issued identifiers in Disabled mode."""

    enabled: bool = Field(
        default=True, description="Validate the format of caller-supplied identifiers"
    )
    format: str = Field(
        default=DEFAULT_GUID_PATTERN,
        description="Regular expression a caller-supplied identifier must match",
    )
    reject_empty: bool = Field(
        default=True, description="Reject the nil UUID (all zeros)"
    )


class JWTAuthConfig(_FrozenModel):
    """Bearer token validation for Authenticated mode."""

    issuer: str | None = Field(default=None, description="Expected iss claim")
    audience: str | None = Field(default=None, description="Expected aud claim")
    signing_key_ref: str | None = Field(
        default=None,
        description="Signing key reference: 'env:NAME', 'file:/path' or the literal key",
    )
    allowed_algorithms: tuple[str, ...] = Field(
        default=("HS256",), description="JWT algorithms allowed for token validation"
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    user_id_claim: str = Field(
        default="sub", description="Claim name holding the user id"
    )


class OAuthAuthConfig(_FrozenModel):
    """Federated OAuth validation against an external identity provider."""

    tenant_allowlist: tuple[str, ...] = Field(
        default=(), description="Tenant ids whose tokens are accepted"
    )
    client_id: str | None = Field(
        default=None, description="Client id registered with the provider (token audience)"
    )
    client_secret: str | None = Field(
        default=None, description="Client secret used for token introspection"
    )
    issuer: str | None = Field(
        default=None, description="Expected iss claim (skipped when unset)"
    )
    jwks_uri: str | None = Field(
        default=None, description="JWKS endpoint for token signature verification"
    )
    introspection_endpoint: str | None = Field(
        default=None, description="RFC 7662 token introspection endpoint"
    )
    allowed_algorithms: tuple[str, ...] = Field(
        default=("RS256", "RS512", "ES256", "ES384"),
        description="JWT algorithms allowed for provider tokens",
    )
    allowed_scopes: tuple[str, ...] = Field(
        default=(),
        description="Scopes kept from the token (empty = keep all granted scopes)",
    )
    scope_to_role_map: dict[str, tuple[str, ...]] = Field(
        default_factory=dict, description="Granted scope -> application roles"
    )
    timeout_seconds: float = Field(
        default=5.0, description="Upper bound for a single provider call"
    )
    provider_retries: int = Field(
        default=1, ge=0, description="Retries after a provider timeout or outage"
    )
    jwks_cache_ttl: int = Field(default=3600, description="JWKS cache TTL in seconds")
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")

    @field_validator("scope_to_role_map", mode="before")
    @classmethod
    def _normalize_role_map(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {
            scope: (roles,) if isinstance(roles, str) else tuple(roles or ())
            for scope, roles in value.items()
        }


_MODE_ALIASES = {
    "disabled": AuthenticationMode.DISABLED,
    "none": AuthenticationMode.DISABLED,
    "authenticated": AuthenticationMode.AUTHENTICATED,
    "bearertoken": AuthenticationMode.AUTHENTICATED,
    "bearer": AuthenticationMode.AUTHENTICATED,
    "oauth": AuthenticationMode.OAUTH,
    "entraexternalid": AuthenticationMode.OAUTH,
}


class AuthConfig(_FrozenModel):
    """Authentication mode selection plus mode-specific settings."""

    mode: AuthenticationMode = Field(
        default=AuthenticationMode.DISABLED, description="Active authentication mode"
    )
    guid_validation: GuidValidationConfig = Field(default_factory=GuidValidationConfig)
    jwt: JWTAuthConfig = Field(default_factory=JWTAuthConfig)
    oauth: OAuthAuthConfig = Field(default_factory=OAuthAuthConfig)
    audit_id_max_attempts: int = Field(
        default=5, ge=1, description="Audit id generation attempts before giving up"
    )
    audit_log_enabled: bool = Field(
        default=True, description="Write allowed calls to the audit log; denials are always written"
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().replace("_", "").replace("-", "").lower()
            if key in _MODE_ALIASES:
                return _MODE_ALIASES[key]
        return value


class LoggingConfig(_FrozenModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path (unset = console only)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(_FrozenModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./authgate.db", description="Database connection URL"
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(_FrozenModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    name: str = Field(default="authgate", description="Service name used in logs")
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")


class ConfigData(_FrozenModel):
    """Root configuration model that matches the config.yaml structure."""

    auth: AuthConfig = Field(
        default_factory=AuthConfig, description="Authentication configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
