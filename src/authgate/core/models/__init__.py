from .auth_context import AuthenticationContext, build_context
from .auth_mode import AuthenticationMode
from .credentials import Credential, UserProfile
from .identity_profiles import (
    AuthenticatedProfile,
    IdentityProfile,
    OAuthProfile,
    RegistrationProfile,
)

__all__ = [
    "AuthenticatedProfile",
    "AuthenticationContext",
    "AuthenticationMode",
    "Credential",
    "IdentityProfile",
    "OAuthProfile",
    "RegistrationProfile",
    "UserProfile",
    "build_context",
]
