from .config_data import (
    AppConfig,
    AuthConfig,
    ConfigData,
    DatabaseConfig,
    GuidValidationConfig,
    JWTAuthConfig,
    LoggingConfig,
    OAuthAuthConfig,
)
from .config_template import load_templated_yaml, substitute_env_vars

__all__ = [
    "AppConfig",
    "AuthConfig",
    "ConfigData",
    "DatabaseConfig",
    "GuidValidationConfig",
    "JWTAuthConfig",
    "LoggingConfig",
    "OAuthAuthConfig",
    "load_templated_yaml",
    "substitute_env_vars",
]
