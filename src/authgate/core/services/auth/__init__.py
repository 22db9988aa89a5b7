from .audit_sink import AuditEvent, AuditSink, InMemoryAuditSink, LoguruAuditSink
from .authorization import (
    ALLOW_ANONYMOUS,
    AuthorizationGate,
    CapabilityRequirement,
    evaluate,
)
from .identity_resolver import IdentityResolver
from .mode_resolver import resolve_mode

__all__ = [
    "ALLOW_ANONYMOUS",
    "AuditEvent",
    "AuditSink",
    "AuthorizationGate",
    "CapabilityRequirement",
    "IdentityResolver",
    "InMemoryAuditSink",
    "LoguruAuditSink",
    "evaluate",
    "resolve_mode",
]
