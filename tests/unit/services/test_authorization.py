import pytest
from loguru import logger

from src.authgate.core.errors import (
    AuditStoreError,
    AuthenticationError,
    AuthenticationReason,
    AuthorizationError,
    AuthorizationReason,
)
from src.authgate.core.models.auth_context import AuthenticationContext
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.auth.audit_sink import (
    AuditEvent,
    AuditSink,
    InMemoryAuditSink,
    LoguruAuditSink,
)
from src.authgate.core.services.auth.authorization import (
    ALLOW_ANONYMOUS,
    AuthorizationGate,
    CapabilityRequirement,
    evaluate,
)

_ADMIN_ONLY = CapabilityRequirement.roles("Admin")


class FailingSink(AuditSink):
    def emit(self, event: AuditEvent) -> None:
        raise OSError("audit log unavailable")


def _caller(*roles: str) -> AuthenticationContext:
    return AuthenticationContext(
        is_authenticated=True,
        subject_id="user-1",
        user_name="Ada",
        roles=frozenset(roles),
        mode=AuthenticationMode.AUTHENTICATED,
        audit_id="aaaaaaaa-0000-4000-8000-000000000001",
    )


class TestCapabilityRequirement:
    def test_anonymous_cannot_name_roles(self):
        with pytest.raises(ValueError):
            CapabilityRequirement(allow_anonymous=True, any_of=frozenset({"Admin"}))

    def test_role_requirement_needs_roles(self):
        with pytest.raises(ValueError):
            CapabilityRequirement()

    def test_describe(self):
        assert ALLOW_ANONYMOUS.describe() == "AllowAnonymous"
        assert CapabilityRequirement.roles("Sales", "Admin").describe() == "any of: Admin, Sales"


class TestEvaluate:
    def test_anonymous_allowed_for_everyone(self):
        assert evaluate(AuthenticationContext.anonymous(), ALLOW_ANONYMOUS) is None

    def test_unauthenticated(self):
        assert (
            evaluate(AuthenticationContext.anonymous(), _ADMIN_ONLY)
            is AuthorizationReason.NOT_AUTHENTICATED
        )

    def test_insufficient_role(self):
        assert evaluate(_caller("Sales"), _ADMIN_ONLY) is AuthorizationReason.INSUFFICIENT_ROLE

    def test_any_role_matches_case_insensitively(self):
        requirement = CapabilityRequirement.roles("Admin", "Sales")
        assert evaluate(_caller("sales"), requirement) is None


class TestAuthorizationGate:
    def test_allow_is_audited(self, gate: AuthorizationGate, audit_sink: InMemoryAuditSink):
        gate.authorize(_caller("Admin"), _ADMIN_ONLY, tool_name="lookup")

        [event] = audit_sink.events
        assert event.decision == "allow"
        assert event.reason_code is None
        assert event.required_roles == ("Admin",)
        assert event.audit_id == "aaaaaaaa-0000-4000-8000-000000000001"

    def test_denial_is_audited_and_raised(
        self, gate: AuthorizationGate, audit_sink: InMemoryAuditSink
    ):
        with pytest.raises(AuthorizationError) as exc_info:
            gate.authorize(_caller("ReadOnly"), _ADMIN_ONLY, tool_name="lookup")

        assert exc_info.value.reason is AuthorizationReason.INSUFFICIENT_ROLE
        [event] = audit_sink.denials()
        assert event.reason_code == "INSUFFICIENT_ROLE"
        assert event.subject_id == "user-1"

    def test_unaudited_denial_fails_closed(self):
        gate = AuthorizationGate(FailingSink())
        with pytest.raises(AuditStoreError):
            gate.authorize(AuthenticationContext.anonymous(), _ADMIN_ONLY, tool_name="lookup")

    def test_sink_failure_does_not_block_allowed_call(self):
        AuthorizationGate(FailingSink()).authorize(
            _caller("Admin"), _ADMIN_ONLY, tool_name="lookup"
        )

    def test_authentication_failure_recorded(
        self, gate: AuthorizationGate, audit_sink: InMemoryAuditSink
    ):
        error = AuthenticationError(AuthenticationReason.INVALID_TOKEN)
        gate.record_authentication_failure(
            error, tool_name="multiply", mode=AuthenticationMode.OAUTH
        )

        [event] = audit_sink.denials()
        assert event.reason_code == "INVALID_TOKEN"
        assert event.subject_id is None


class TestLoguruAuditSink:
    @pytest.fixture
    def records(self):
        captured: list[dict] = []
        handler_id = logger.add(lambda message: captured.append(message.record), level="INFO")
        yield captured
        logger.remove(handler_id)

    def test_emits_tagged_record(self, records: list[dict]):
        LoguruAuditSink().emit(
            AuditEvent(decision="deny", reason_code="NOT_AUTHENTICATED", tool_name="lookup")
        )
        [record] = [r for r in records if r["extra"].get("audit")]
        assert record["level"].name == "WARNING"
        assert record["extra"]["tool_name"] == "lookup"

    def test_disabled_sink_skips_allow_events(self, records: list[dict]):
        LoguruAuditSink(enabled=False).emit(AuditEvent(decision="allow", tool_name="lookup"))
        assert not [r for r in records if r["extra"].get("audit")]

    @pytest.mark.parametrize("enabled", [True, False])
    def test_gate_denial_is_always_logged(self, records: list[dict], enabled: bool):
        gate = AuthorizationGate(LoguruAuditSink(enabled=enabled))
        with pytest.raises(AuthorizationError):
            gate.authorize(AuthenticationContext.anonymous(), _ADMIN_ONLY, tool_name="lookup")

        [record] = [r for r in records if r["extra"].get("audit")]
        assert record["extra"]["decision"] == "deny"
        assert record["extra"]["reason_code"] == "NOT_AUTHENTICATED"

    def test_failed_audit_write_fails_closed(self):
        def broken(message):
            raise RuntimeError("disk full")

        handler_id = logger.add(
            broken, filter=lambda record: bool(record["extra"].get("audit")), catch=False
        )
        try:
            gate = AuthorizationGate(LoguruAuditSink(enabled=False))
            with pytest.raises(AuditStoreError):
                gate.authorize(_caller("ReadOnly"), _ADMIN_ONLY, tool_name="lookup")
        finally:
            logger.remove(handler_id)
