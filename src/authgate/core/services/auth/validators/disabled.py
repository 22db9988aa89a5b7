import re
import uuid

from loguru import logger
from pydantic import ValidationError

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.credentials import Credential, UserProfile
from src.authgate.core.models.identity_profiles import RegistrationProfile
from src.authgate.core.services.auth.validators.base import ModeValidator
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.entities import DisabledModeIdentity
from src.authgate.runtime.config.config_data import GuidValidationConfig


def parse_registration_profile(profile: UserProfile | None) -> RegistrationProfile:
    """Validate caller-supplied profile fields.

    Raises:
        AuthenticationError: INVALID_PROFILE when name or email are unusable.
    """
    if profile is None:
        raise AuthenticationError(
            AuthenticationReason.INVALID_PROFILE,
            "A name and email are required on first contact",
        )
    try:
        return RegistrationProfile.model_validate(profile.model_dump())
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise AuthenticationError(
            AuthenticationReason.INVALID_PROFILE,
            f"Invalid profile fields: {', '.join(fields) or 'profile'}",
        ) from exc


class DisabledModeValidator(ModeValidator):
    """Accepts a self-issued UUID as the caller's identity."""

    mode = AuthenticationMode.DISABLED

    def __init__(self, store: IdentityRecordStore, config: GuidValidationConfig) -> None:
        super().__init__(store)
        self._pattern = re.compile(config.format)
        self._reject_empty = config.reject_empty

    def canonical_identifier(self, value: str | None) -> str:
        """Return the lowercase hyphenated form of a well-formed identifier.

        Raises:
            AuthenticationError: MALFORMED_IDENTIFIER otherwise.
        """
        candidate = (value or "").strip()
        if not candidate or not self._pattern.fullmatch(candidate):
            raise AuthenticationError(
                AuthenticationReason.MALFORMED_IDENTIFIER, "Identifier is not a valid GUID"
            )
        try:
            parsed = uuid.UUID(candidate)
        except ValueError as exc:
            raise AuthenticationError(
                AuthenticationReason.MALFORMED_IDENTIFIER, "Identifier is not a valid GUID"
            ) from exc
        if self._reject_empty and parsed.int == 0:
            raise AuthenticationError(
                AuthenticationReason.MALFORMED_IDENTIFIER, "The empty GUID is not allowed"
            )
        return str(parsed)

    async def validate(self, credential: Credential) -> DisabledModeIdentity:
        identifier = self.canonical_identifier(credential.value)

        record = self._store.touch(identifier)
        if record is not None:
            return record

        profile = parse_registration_profile(credential.profile)
        record, created = self._store.find_or_create(identifier, profile)
        if created:
            logger.info("First contact from {} ({})", identifier, profile.email)
        return record
