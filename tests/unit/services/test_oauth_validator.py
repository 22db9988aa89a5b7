import pytest

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.models.credentials import Credential
from src.authgate.core.services.auth.validators import OAuthModeValidator
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.runtime.config.config_data import OAuthAuthConfig
from tests.fixtures.services import CountingJwksHandler, StaticClaimsVerifier


class TestOAuthModeValidator:
    async def test_scopes_mapped_to_roles(
        self, oauth_validator: OAuthModeValidator, provider_token
    ):
        token = provider_token(
            "oid-1", scp="Admin.All Support.ReadWrite", email="grace@contoso.com", name="Grace"
        )
        record = await oauth_validator.validate(Credential(value=token))

        assert record.object_id == "oid-1"
        assert record.display_name == "Grace"
        assert record.granted_scopes == ("Admin.All", "Support.ReadWrite")
        assert record.roles == ("Admin", "CustomerService", "ReadOnly")

    async def test_unmapped_scope_grants_nothing(
        self, oauth_validator: OAuthModeValidator, provider_token
    ):
        record = await oauth_validator.validate(
            Credential(value=provider_token(scp="User.Read"))
        )
        assert record.granted_scopes == ("User.Read",)
        assert record.roles == ()

    async def test_tenant_not_allowed(
        self,
        oauth_validator: OAuthModeValidator,
        oauth_store: IdentityRecordStore,
        provider_token,
    ):
        token = provider_token("oid-outsider", tid="00000000-2222-4b4b-8c8c-000000000000")
        with pytest.raises(AuthenticationError) as exc_info:
            await oauth_validator.validate(Credential(value=token))

        assert exc_info.value.reason is AuthenticationReason.TENANT_NOT_ALLOWED
        assert oauth_store.get("oid-outsider") is None

    async def test_tenant_match_ignores_case(
        self, oauth_validator: OAuthModeValidator, provider_token, tenant_id: str
    ):
        record = await oauth_validator.validate(
            Credential(value=provider_token(tid=tenant_id.upper()))
        )
        assert record.tenant_id == tenant_id.upper()

    async def test_subject_used_without_object_id(
        self, oauth_validator: OAuthModeValidator, provider_token
    ):
        token = provider_token(oid=None, sub="sub-only")
        record = await oauth_validator.validate(Credential(value=token))
        assert record.object_id == "sub-only"

    async def test_wrong_audience(self, oauth_validator: OAuthModeValidator, provider_token):
        with pytest.raises(AuthenticationError) as exc_info:
            await oauth_validator.validate(
                Credential(value=provider_token(aud="api://other-app"))
            )
        assert exc_info.value.reason is AuthenticationReason.INVALID_TOKEN

    async def test_jwks_fetched_once(
        self,
        oauth_validator: OAuthModeValidator,
        jwks_handler: CountingJwksHandler,
        provider_token,
    ):
        await oauth_validator.validate(Credential(value=provider_token("oid-1")))
        await oauth_validator.validate(Credential(value=provider_token("oid-2")))
        assert jwks_handler.calls == 1

    async def test_allowed_scopes_filter(
        self, oauth_store: IdentityRecordStore, oauth_config: OAuthAuthConfig, tenant_id: str
    ):
        config = oauth_config.model_copy(update={"allowed_scopes": ("sales.readwrite",)})
        verifier = StaticClaimsVerifier(
            {"tid": tenant_id, "oid": "oid-1", "scp": ["Admin.All", "Sales.ReadWrite"]}
        )
        validator = OAuthModeValidator(oauth_store, config, verifier)

        record = await validator.validate(Credential(value="opaque"))

        assert record.granted_scopes == ("Sales.ReadWrite",)
        assert record.roles == ("Sales",)

    async def test_missing_tenant(self, oauth_store: IdentityRecordStore, oauth_config):
        validator = OAuthModeValidator(
            oauth_store, oauth_config, StaticClaimsVerifier({"oid": "oid-1"})
        )
        with pytest.raises(AuthenticationError) as exc_info:
            await validator.validate(Credential(value="opaque"))
        assert exc_info.value.reason is AuthenticationReason.TENANT_NOT_ALLOWED
