import pytest

from src.authgate.core.errors import (
    AuditStoreError,
    AuditStoreReason,
    AuthenticationError,
    AuthenticationReason,
)
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.credentials import Credential, UserProfile
from src.authgate.core.services.auth.identity_resolver import IdentityResolver
from src.authgate.core.services.auth.validators import (
    AuthenticatedModeValidator,
    DisabledModeValidator,
)
from src.authgate.core.services.identity.record_store import IdentityRecordStore

_GUID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


class TestIdentityResolver:
    async def test_no_credential_is_anonymous(self, disabled_validator: DisabledModeValidator):
        resolver = IdentityResolver(AuthenticationMode.DISABLED, disabled_validator)

        for credential in (None, Credential(), Credential(value="   ")):
            ctx = await resolver.resolve_identity(credential)
            assert not ctx.is_authenticated
            assert ctx.mode is AuthenticationMode.DISABLED

    async def test_disabled_caller(self, disabled_validator: DisabledModeValidator):
        resolver = IdentityResolver(AuthenticationMode.DISABLED, disabled_validator)
        ctx = await resolver.resolve_identity(
            Credential(value=_GUID, profile=UserProfile(name="Ada", email="ada@contoso.com"))
        )

        assert ctx.is_authenticated
        assert ctx.audit_id == _GUID
        assert ctx.roles == frozenset()

    async def test_bearer_caller(self, bearer_validator: AuthenticatedModeValidator, bearer_token):
        resolver = IdentityResolver(AuthenticationMode.AUTHENTICATED, bearer_validator)
        ctx = await resolver.resolve_identity(
            Credential(value=bearer_token("user-9", roles=["Admin"]))
        )

        assert ctx.subject_id == "user-9"
        assert ctx.has_role("admin")
        assert ctx.audit_id

    async def test_store_failure_is_an_authentication_failure(
        self,
        bearer_validator: AuthenticatedModeValidator,
        authenticated_store: IdentityRecordStore,
        bearer_token,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def unavailable(*args, **kwargs):
            raise AuditStoreError(AuditStoreReason.PERSISTENCE_FAILURE)

        monkeypatch.setattr(authenticated_store, "find_or_create", unavailable)
        resolver = IdentityResolver(AuthenticationMode.AUTHENTICATED, bearer_validator)

        with pytest.raises(AuthenticationError) as exc_info:
            await resolver.resolve_identity(Credential(value=bearer_token()))
        assert exc_info.value.reason is AuthenticationReason.IDENTITY_STORE_FAILURE

    def test_validator_must_match_mode(self, disabled_validator: DisabledModeValidator):
        with pytest.raises(ValueError):
            IdentityResolver(AuthenticationMode.OAUTH, disabled_validator)
