"""Destinations for authorization audit events."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.entities.core._base import utc_now


class AuditEvent(BaseModel):
    """One allow or deny decision."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    subject_id: str | None = None
    audit_id: str | None = None
    mode: AuthenticationMode | None = None
    decision: Literal["allow", "deny"]
    reason_code: str | None = None
    tool_name: str
    required_roles: tuple[str, ...] = ()


class AuditSink(ABC):
    @abstractmethod
    def emit(self, event: AuditEvent) -> None:
        """Record ``event``; raise if it could not be recorded."""
        raise NotImplementedError


class LoguruAuditSink(AuditSink):
    """Writes audit events as structured loguru records tagged ``audit=True``.

    ``enabled=False`` silences allow events only; denials are always written.
    A failed write raises only through a handler added with ``catch=False``,
    which is how ``configure_logging`` installs the audit handler.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled

    def emit(self, event: AuditEvent) -> None:
        if event.decision == "allow" and not self._enabled:
            return
        payload = event.model_dump(mode="json")
        level = "INFO" if event.decision == "allow" else "WARNING"
        logger.bind(audit=True, **payload).log(
            level,
            "Authorization {} for tool {} (subject={}, reason={})",
            event.decision,
            event.tool_name,
            event.subject_id or "anonymous",
            event.reason_code or "-",
        )


class InMemoryAuditSink(AuditSink):
    """Keeps events in memory, for tests and diagnostics."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def emit(self, event: AuditEvent) -> None:
        self.events.append(event)

    def denials(self) -> list[AuditEvent]:
        return [e for e in self.events if e.decision == "deny"]

    def clear(self) -> None:
        self.events.clear()
