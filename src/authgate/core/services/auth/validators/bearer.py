from typing import Any

from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.credentials import Credential
from src.authgate.core.models.identity_profiles import AuthenticatedProfile
from src.authgate.core.services.auth.validators.base import ModeValidator
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.core.services.jwt.jwt_utils import (
    extract_roles,
    first_claim,
    preview_jwt,
    require_allowed_algorithm,
)
from src.authgate.core.services.jwt.signing_keys import resolve_signing_key
from src.authgate.entities import AuthenticatedIdentity
from src.authgate.runtime.config.config_data import JWTAuthConfig


class AuthenticatedModeValidator(ModeValidator):
    """Verifies bearer JWTs signed with the configured key."""

    mode = AuthenticationMode.AUTHENTICATED

    def __init__(self, store: IdentityRecordStore, config: JWTAuthConfig) -> None:
        super().__init__(store)
        self._config = config
        self._key = resolve_signing_key(config.signing_key_ref or "")
        self._jwt = JsonWebToken(list(config.allowed_algorithms))
        self._claims_options = {
            "iss": {"essential": True, "value": config.issuer},
            "aud": {"essential": True, "value": config.audience},
            "exp": {"essential": True},
        }

    def verify_token(self, token: str) -> dict[str, Any]:
        """Check signature, issuer, audience and lifetime; return the claims."""
        pv = preview_jwt(token)
        require_allowed_algorithm(pv, self._config.allowed_algorithms)
        try:
            claims = self._jwt.decode(token, self._key, claims_options=self._claims_options)
            claims.validate(leeway=self._config.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.info("Bearer token rejected: {}", exc)
            raise AuthenticationError(
                AuthenticationReason.INVALID_TOKEN, f"JWT error: {exc}"
            ) from exc
        return dict(claims)

    async def validate(self, credential: Credential) -> AuthenticatedIdentity:
        if credential.is_empty:
            raise AuthenticationError(AuthenticationReason.INVALID_TOKEN, "Missing bearer token")
        claims = self.verify_token(credential.value.strip())

        user_id = first_claim(claims, self._config.user_id_claim)
        if user_id is None:
            raise AuthenticationError(
                AuthenticationReason.INVALID_TOKEN,
                f"Token has no {self._config.user_id_claim} claim",
            )

        profile = AuthenticatedProfile(
            email=first_claim(claims, "email"),
            display_name=first_claim(claims, "name", "preferred_username"),
            roles=tuple(extract_roles(claims)),
        )
        record, _ = self._store.find_or_create(user_id, profile)
        return record
