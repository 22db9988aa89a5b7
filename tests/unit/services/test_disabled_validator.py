import pytest

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.models.credentials import Credential, UserProfile
from src.authgate.core.services.auth.validators import (
    DisabledModeValidator,
    parse_registration_profile,
)
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.runtime.config.config_data import GuidValidationConfig

_GUID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"
_PROFILE = UserProfile(name="Ada Lovelace", email="ada@contoso.com", organization="Contoso")


class TestCanonicalIdentifier:
    def test_lowercases(self, disabled_validator: DisabledModeValidator):
        assert disabled_validator.canonical_identifier(f" {_GUID.upper()} ") == _GUID

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "not-a-guid",
            "3f2504e0-4f89-41d3-9a0c-0305e82c330",
            "{3f2504e0-4f89-41d3-9a0c-0305e82c3301}",
            "3f2504e04f8941d39a0c0305e82c3301",
            "00000000-0000-0000-0000-000000000000",
        ],
    )
    def test_rejects(self, disabled_validator: DisabledModeValidator, value):
        with pytest.raises(AuthenticationError) as exc_info:
            disabled_validator.canonical_identifier(value)
        assert exc_info.value.reason is AuthenticationReason.MALFORMED_IDENTIFIER


class TestParseRegistrationProfile:
    def test_valid(self):
        profile = parse_registration_profile(
            UserProfile(name=" Ada ", email="ADA@contoso.com")
        )
        assert profile.name == "Ada"
        assert profile.email == "ada@contoso.com"

    def test_missing_profile(self):
        with pytest.raises(AuthenticationError) as exc_info:
            parse_registration_profile(None)
        assert exc_info.value.reason is AuthenticationReason.INVALID_PROFILE

    def test_reports_failing_fields(self):
        with pytest.raises(AuthenticationError) as exc_info:
            parse_registration_profile(UserProfile(name="", email="not-an-email"))
        assert exc_info.value.reason is AuthenticationReason.INVALID_PROFILE
        assert "email" in exc_info.value.message
        assert "name" in exc_info.value.message


class TestDisabledModeValidator:
    async def test_first_contact_creates_record(
        self, disabled_validator: DisabledModeValidator, disabled_store: IdentityRecordStore
    ):
        record = await disabled_validator.validate(Credential(value=_GUID, profile=_PROFILE))

        assert record.identifier == _GUID
        assert record.organization == "Contoso"
        assert disabled_store.get(_GUID) is not None

    async def test_returning_caller_needs_no_profile(
        self, disabled_validator: DisabledModeValidator
    ):
        await disabled_validator.validate(Credential(value=_GUID, profile=_PROFILE))
        record = await disabled_validator.validate(Credential(value=_GUID.upper()))
        assert record.name == "Ada Lovelace"

    async def test_first_contact_without_profile(
        self, disabled_validator: DisabledModeValidator, disabled_store: IdentityRecordStore
    ):
        with pytest.raises(AuthenticationError) as exc_info:
            await disabled_validator.validate(Credential(value=_GUID))
        assert exc_info.value.reason is AuthenticationReason.INVALID_PROFILE
        assert disabled_store.get(_GUID) is None

    async def test_malformed_identifier_writes_nothing(
        self, disabled_validator: DisabledModeValidator, disabled_store: IdentityRecordStore
    ):
        with pytest.raises(AuthenticationError):
            await disabled_validator.validate(Credential(value="guest", profile=_PROFILE))
        assert disabled_store.get("guest") is None

    def test_requires_disabled_store(self, authenticated_store: IdentityRecordStore):
        with pytest.raises(ValueError):
            DisabledModeValidator(authenticated_store, GuidValidationConfig())
