"""Authenticated-mode identity domain entity."""

from typing import Literal

from pydantic import Field

from src.authgate.entities.core._base import Entity


class AuthenticatedIdentity(Entity):
    """Identity behind a verified bearer token, keyed by the user id claim."""

    kind: Literal["authenticated"] = "authenticated"
    user_id: str = Field(description="User id claim from the token")
    email: str | None = Field(default=None)
    display_name: str | None = Field(default=None)
    roles: tuple[str, ...] = Field(default=(), description="Roles from the latest token")
    audit_id: str = Field(description="Immutable audit id issued at first contact")
