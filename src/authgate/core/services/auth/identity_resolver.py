from loguru import logger

from src.authgate.core.errors import (
    AuditStoreError,
    AuthenticationError,
    AuthenticationReason,
)
from src.authgate.core.models.auth_context import AuthenticationContext, build_context
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.credentials import Credential
from src.authgate.core.services.auth.validators.base import ModeValidator


class IdentityResolver:
    """Turns an inbound credential into the caller's AuthenticationContext."""

    def __init__(self, mode: AuthenticationMode, validator: ModeValidator) -> None:
        if validator.mode is not mode:
            raise ValueError(
                f"Validator for {validator.mode.value} cannot serve {mode.value} mode"
            )
        self._mode = mode
        self._validator = validator

    @property
    def mode(self) -> AuthenticationMode:
        return self._mode

    async def resolve_identity(self, credential: Credential | None) -> AuthenticationContext:
        """Validate ``credential`` with the active validator.

        No credential yields the anonymous context. Store failures are
        reported as ``AuthenticationError(IDENTITY_STORE_FAILURE)``.
        """
        if credential is None or credential.is_empty:
            return AuthenticationContext.anonymous(self._mode)

        try:
            record = await self._validator.validate(credential)
        except AuditStoreError as exc:
            logger.error("Identity store failure during authentication: {}", exc)
            raise AuthenticationError(
                AuthenticationReason.IDENTITY_STORE_FAILURE,
                f"Identity could not be confirmed ({exc.reason.value})",
            ) from exc
        return build_context(record, self._mode)
