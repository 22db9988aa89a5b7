"""Disabled-mode identity domain entity."""

from typing import Literal

from pydantic import Field

from src.authgate.entities.core._base import Entity


class DisabledModeIdentity(Entity):
    """Identity of a caller that presents a self-issued UUID.

    The identifier doubles as the audit id; there is no separate one.
    """

    kind: Literal["disabled"] = "disabled"
    identifier: str = Field(description="Canonical lowercase hyphenated UUID")
    name: str = Field(description="Display name supplied at first contact")
    email: str = Field(description="Lower-cased email, unique across identities")
    organization: str | None = Field(default=None)
    session_id: str | None = Field(default=None)

    @property
    def audit_id(self) -> str:
        return self.identifier
