"""Authenticated-mode identity entity package."""

from .entity import AuthenticatedIdentity
from .repository import AuthenticatedIdentityRepository
from .table import AuthenticatedIdentityTable

__all__ = [
    "AuthenticatedIdentity",
    "AuthenticatedIdentityRepository",
    "AuthenticatedIdentityTable",
]
