"""OAuth-mode identity domain entity."""

from typing import Literal

from pydantic import Field

from src.authgate.entities.core._base import Entity


class OAuthIdentity(Entity):
    """Identity federated from an external provider, keyed by object id."""

    kind: Literal["oauth"] = "oauth"
    object_id: str = Field(description="Provider object id (oid, falling back to sub)")
    tenant_id: str = Field(description="Provider tenant the token was issued for")
    email: str | None = Field(default=None)
    display_name: str | None = Field(default=None)
    granted_scopes: tuple[str, ...] = Field(default=())
    roles: tuple[str, ...] = Field(
        default=(), description="Application roles mapped from the granted scopes"
    )
    audit_id: str = Field(description="Immutable audit id issued at first contact")
