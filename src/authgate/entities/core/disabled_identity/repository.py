"""Disabled-mode identity repository."""

from src.authgate.entities.core._repository import IdentityRepository

from .entity import DisabledModeIdentity
from .table import DisabledModeIdentityTable


class DisabledModeIdentityRepository(
    IdentityRepository[DisabledModeIdentity, DisabledModeIdentityTable]
):
    entity_type = DisabledModeIdentity
    table_type = DisabledModeIdentityTable
    key_column = "identifier"

    def get_by_email(self, email: str) -> DisabledModeIdentity | None:
        return self.get_by("email", email.lower())
