from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.auth.provider import TokenVerifier, build_token_verifier
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.runtime.config.config_data import AuthConfig

from .base import ModeValidator
from .bearer import AuthenticatedModeValidator
from .disabled import DisabledModeValidator, parse_registration_profile
from .oauth import OAuthModeValidator


def build_validator(
    mode: AuthenticationMode,
    config: AuthConfig,
    store: IdentityRecordStore,
    *,
    verifier: TokenVerifier | None = None,
) -> ModeValidator:
    """Construct the single validator for the resolved mode."""
    if mode is AuthenticationMode.DISABLED:
        return DisabledModeValidator(store, config.guid_validation)
    if mode is AuthenticationMode.AUTHENTICATED:
        return AuthenticatedModeValidator(store, config.jwt)
    return OAuthModeValidator(
        store, config.oauth, verifier or build_token_verifier(config.oauth)
    )


__all__ = [
    "AuthenticatedModeValidator",
    "DisabledModeValidator",
    "ModeValidator",
    "OAuthModeValidator",
    "build_validator",
    "parse_registration_profile",
]
