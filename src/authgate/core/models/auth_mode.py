"""Authentication operating modes."""

from enum import Enum


class AuthenticationMode(str, Enum):
    """The three mutually exclusive ways a deployment authenticates callers."""

    DISABLED = "disabled"
    AUTHENTICATED = "authenticated"
    OAUTH = "oauth"
