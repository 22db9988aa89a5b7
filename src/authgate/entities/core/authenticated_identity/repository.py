"""Authenticated-mode identity repository."""

from src.authgate.entities.core._repository import IdentityRepository

from .entity import AuthenticatedIdentity
from .table import AuthenticatedIdentityTable


class AuthenticatedIdentityRepository(
    IdentityRepository[AuthenticatedIdentity, AuthenticatedIdentityTable]
):
    entity_type = AuthenticatedIdentity
    table_type = AuthenticatedIdentityTable
    key_column = "user_id"

    def get_by_audit_id(self, audit_id: str) -> AuthenticatedIdentity | None:
        return self.get_by("audit_id", audit_id)

    def audit_id_exists(self, audit_id: str) -> bool:
        return self.value_exists("audit_id", audit_id)
