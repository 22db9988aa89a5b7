"""OAuth-mode identity entity package."""

from .entity import OAuthIdentity
from .repository import OAuthIdentityRepository
from .table import OAuthIdentityTable

__all__ = ["OAuthIdentity", "OAuthIdentityRepository", "OAuthIdentityTable"]
