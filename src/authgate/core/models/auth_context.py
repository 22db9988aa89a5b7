"""Request-scoped authentication context."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.entities import (
    AuthenticatedIdentity,
    DisabledModeIdentity,
    IdentityRecord,
    OAuthIdentity,
)


class AuthenticationContext(BaseModel):
    """Immutable view of the caller, built fresh for every invocation.

    Role checks are case-insensitive. The context is never persisted.
    """

    model_config = ConfigDict(frozen=True)

    is_authenticated: bool = False
    subject_id: str | None = None
    user_name: str | None = None
    roles: frozenset[str] = Field(default_factory=frozenset)
    mode: AuthenticationMode | None = None
    audit_id: str | None = None

    @classmethod
    def anonymous(cls, mode: AuthenticationMode | None = None) -> "AuthenticationContext":
        """Context for a caller that presented no credential."""
        return cls(is_authenticated=False, mode=mode)

    def has_role(self, role: str) -> bool:
        wanted = role.casefold()
        return any(r.casefold() == wanted for r in self.roles)

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return any(self.has_role(role) for role in roles)

    def display_name(self) -> str:
        if not self.is_authenticated:
            return "Anonymous"
        return self.user_name or self.subject_id or "Unknown User"


def build_context(record: IdentityRecord, mode: AuthenticationMode) -> AuthenticationContext:
    """Convert a validated identity record into the caller's context.

    Raises:
        TypeError: If the record variant does not belong to ``mode``.
    """
    match record:
        case DisabledModeIdentity() if mode is AuthenticationMode.DISABLED:
            # Disabled mode grants no roles
            return AuthenticationContext(
                is_authenticated=True,
                subject_id=record.identifier,
                user_name=record.name,
                roles=frozenset(),
                mode=mode,
                audit_id=record.identifier,
            )
        case AuthenticatedIdentity() if mode is AuthenticationMode.AUTHENTICATED:
            return AuthenticationContext(
                is_authenticated=True,
                subject_id=record.user_id,
                user_name=record.display_name or record.email,
                roles=frozenset(record.roles),
                mode=mode,
                audit_id=record.audit_id,
            )
        case OAuthIdentity() if mode is AuthenticationMode.OAUTH:
            return AuthenticationContext(
                is_authenticated=True,
                subject_id=record.object_id,
                user_name=record.display_name or record.email,
                roles=frozenset(record.roles),
                mode=mode,
                audit_id=record.audit_id,
            )
    raise TypeError(
        f"Identity record {type(record).__name__} does not belong to mode {mode.value}"
    )
