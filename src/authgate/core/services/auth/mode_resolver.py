"""Startup resolution of the active authentication mode."""

import re

from loguru import logger

from src.authgate.core.errors import ConfigurationError
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.jwt.signing_keys import resolve_signing_key
from src.authgate.runtime.config.config_data import AuthConfig


def _check_disabled(config: AuthConfig) -> None:
    guid = config.guid_validation
    if not guid.enabled:
        raise ConfigurationError(
            "Disabled mode requires guid_validation.enabled; "
            "unvalidated identifiers cannot be used as audit ids"
        )
    try:
        re.compile(guid.format)
    except re.error as e:
        raise ConfigurationError(f"guid_validation.format is not a valid pattern: {e}") from e


def _check_authenticated(config: AuthConfig) -> None:
    jwt = config.jwt
    missing = [
        name
        for name in ("issuer", "audience", "signing_key_ref")
        if not getattr(jwt, name)
    ]
    if missing:
        raise ConfigurationError(
            "Authenticated mode requires jwt settings: " + ", ".join(missing)
        )
    if not jwt.allowed_algorithms:
        raise ConfigurationError("jwt.allowed_algorithms must not be empty")
    try:
        resolve_signing_key(jwt.signing_key_ref)
    except ValueError as e:
        raise ConfigurationError(f"jwt.signing_key_ref cannot be resolved: {e}") from e


def _check_oauth(config: AuthConfig) -> None:
    oauth = config.oauth
    if not oauth.tenant_allowlist:
        raise ConfigurationError("OAuth mode requires a non-empty oauth.tenant_allowlist")
    if not oauth.client_id:
        raise ConfigurationError("OAuth mode requires oauth.client_id")
    if not (oauth.jwks_uri or oauth.introspection_endpoint):
        raise ConfigurationError(
            "OAuth mode requires oauth.jwks_uri or oauth.introspection_endpoint"
        )
    if oauth.timeout_seconds <= 0:
        raise ConfigurationError("oauth.timeout_seconds must be positive")
    if not oauth.allowed_algorithms and oauth.jwks_uri:
        raise ConfigurationError("oauth.allowed_algorithms must not be empty")


_CHECKS = {
    AuthenticationMode.DISABLED: _check_disabled,
    AuthenticationMode.AUTHENTICATED: _check_authenticated,
    AuthenticationMode.OAUTH: _check_oauth,
}


def resolve_mode(config: AuthConfig) -> AuthenticationMode:
    """Validate the auth configuration and return the single active mode.

    Evaluated once at startup.

    Raises:
        ConfigurationError: If the selected mode is missing required settings.
    """
    mode = config.mode
    _CHECKS[mode](config)
    logger.info("Authentication mode resolved: {}", mode.value)
    return mode
