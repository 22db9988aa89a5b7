"""Disabled-mode identity entity package.

- DisabledModeIdentity: domain entity keyed by the caller's UUID
- DisabledModeIdentityTable: database persistence model
- DisabledModeIdentityRepository: data access layer
"""

from .entity import DisabledModeIdentity
from .repository import DisabledModeIdentityRepository
from .table import DisabledModeIdentityTable

__all__ = [
    "DisabledModeIdentity",
    "DisabledModeIdentityRepository",
    "DisabledModeIdentityTable",
]
