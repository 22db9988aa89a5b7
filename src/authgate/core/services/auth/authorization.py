"""Capability requirements and the gate that enforces them."""

from dataclasses import dataclass, field

from loguru import logger

from src.authgate.core.errors import (
    AuditStoreError,
    AuditStoreReason,
    AuthenticationError,
    AuthorizationError,
    AuthorizationReason,
)
from src.authgate.core.models.auth_context import AuthenticationContext
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.auth.audit_sink import AuditEvent, AuditSink


@dataclass(frozen=True)
class CapabilityRequirement:
    """What a tool demands of its caller: nothing, or any one of a set of roles."""

    allow_anonymous: bool = False
    any_of: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.allow_anonymous and self.any_of:
            raise ValueError("An anonymous requirement cannot also name roles")
        if not self.allow_anonymous and not self.any_of:
            raise ValueError("A role requirement needs at least one role")

    @classmethod
    def roles(cls, *roles: str) -> "CapabilityRequirement":
        return cls(any_of=frozenset(roles))

    def describe(self) -> str:
        if self.allow_anonymous:
            return "AllowAnonymous"
        return "any of: " + ", ".join(sorted(self.any_of))


ALLOW_ANONYMOUS = CapabilityRequirement(allow_anonymous=True)


def evaluate(
    context: AuthenticationContext, requirement: CapabilityRequirement
) -> AuthorizationReason | None:
    """Return the denial reason, or None when the call is allowed."""
    if requirement.allow_anonymous:
        return None
    if not context.is_authenticated:
        return AuthorizationReason.NOT_AUTHENTICATED
    if not context.has_any_role(requirement.any_of):
        return AuthorizationReason.INSUFFICIENT_ROLE
    return None


class AuthorizationGate:
    """Checks a context against a tool's requirement and audits the decision.

    Denials must be recorded: if the sink fails on a denial the gate raises
    ``AuditStoreError``. Sink failures on allowed calls are only logged.
    """

    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink

    def authorize(
        self,
        context: AuthenticationContext,
        requirement: CapabilityRequirement,
        *,
        tool_name: str,
    ) -> None:
        reason = evaluate(context, requirement)
        event = AuditEvent(
            subject_id=context.subject_id,
            audit_id=context.audit_id,
            mode=context.mode,
            decision="allow" if reason is None else "deny",
            reason_code=None if reason is None else reason.value,
            tool_name=tool_name,
            required_roles=tuple(sorted(requirement.any_of)),
        )

        if reason is None:
            try:
                self._sink.emit(event)
            except Exception:
                logger.exception("Audit sink failed on allowed call to {}", tool_name)
            return

        self._emit_denial(event)
        raise AuthorizationError(
            reason,
            f"{context.display_name()} may not call {tool_name} ({requirement.describe()})",
        )

    def record_authentication_failure(
        self,
        error: AuthenticationError,
        *,
        tool_name: str,
        mode: AuthenticationMode,
    ) -> None:
        """Audit a credential rejected before any context existed."""
        event = AuditEvent(
            mode=mode,
            decision="deny",
            reason_code=error.reason.value,
            tool_name=tool_name,
        )
        try:
            self._sink.emit(event)
        except Exception:
            logger.exception("Audit sink failed while recording rejected credential")

    def _emit_denial(self, event: AuditEvent) -> None:
        try:
            self._sink.emit(event)
        except Exception as exc:
            logger.exception("Audit sink failed on denial for {}", event.tool_name)
            raise AuditStoreError(
                AuditStoreReason.PERSISTENCE_FAILURE, "Denial could not be audited"
            ) from exc
