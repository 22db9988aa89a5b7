from typing import Any

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.credentials import Credential
from src.authgate.core.models.identity_profiles import OAuthProfile
from src.authgate.core.services.auth.provider import TokenVerifier
from src.authgate.core.services.auth.validators.base import ModeValidator
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.core.services.jwt.jwt_utils import extract_scopes, first_claim
from src.authgate.entities import OAuthIdentity
from src.authgate.runtime.config.config_data import OAuthAuthConfig


class OAuthModeValidator(ModeValidator):
    """Accepts provider tokens from allow-listed tenants.

    Roles come only from the scope-to-role map: an unmapped scope grants
    nothing, a scope mapped to several roles grants all of them.
    """

    mode = AuthenticationMode.OAUTH

    def __init__(
        self,
        store: IdentityRecordStore,
        config: OAuthAuthConfig,
        verifier: TokenVerifier,
    ) -> None:
        super().__init__(store)
        self._verifier = verifier
        self._tenants = frozenset(t.casefold() for t in config.tenant_allowlist)
        self._allowed_scopes = frozenset(s.casefold() for s in config.allowed_scopes)
        self._role_map = {
            scope.casefold(): roles for scope, roles in config.scope_to_role_map.items()
        }

    def granted_scopes(self, claims: dict[str, Any]) -> list[str]:
        scopes = extract_scopes(claims)
        if self._allowed_scopes:
            scopes = [s for s in scopes if s.casefold() in self._allowed_scopes]
        return scopes

    def map_roles(self, scopes: list[str]) -> list[str]:
        roles: list[str] = []
        for scope in scopes:
            for role in self._role_map.get(scope.casefold(), ()):
                if role not in roles:
                    roles.append(role)
        return roles

    async def validate(self, credential: Credential) -> OAuthIdentity:
        if credential.is_empty:
            raise AuthenticationError(AuthenticationReason.INVALID_TOKEN, "Missing bearer token")
        claims = await self._verifier.verify(credential.value.strip())

        tenant_id = first_claim(claims, "tid", "tenant_id")
        if tenant_id is None or tenant_id.casefold() not in self._tenants:
            raise AuthenticationError(
                AuthenticationReason.TENANT_NOT_ALLOWED,
                f"Tenant {tenant_id or '<none>'} is not allowed",
            )

        object_id = first_claim(claims, "oid", "sub")
        if object_id is None:
            raise AuthenticationError(
                AuthenticationReason.INVALID_TOKEN, "Token has no oid or sub claim"
            )

        scopes = self.granted_scopes(claims)
        profile = OAuthProfile(
            tenant_id=tenant_id,
            email=first_claim(claims, "email", "preferred_username", "upn"),
            display_name=first_claim(claims, "name"),
            granted_scopes=tuple(scopes),
            roles=tuple(self.map_roles(scopes)),
        )
        record, _ = self._store.find_or_create(object_id, profile)
        return record
