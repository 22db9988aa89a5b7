"""OAuth-mode identity repository."""

from src.authgate.entities.core._repository import IdentityRepository

from .entity import OAuthIdentity
from .table import OAuthIdentityTable


class OAuthIdentityRepository(IdentityRepository[OAuthIdentity, OAuthIdentityTable]):
    entity_type = OAuthIdentity
    table_type = OAuthIdentityTable
    key_column = "object_id"

    def get_by_audit_id(self, audit_id: str) -> OAuthIdentity | None:
        return self.get_by("audit_id", audit_id)

    def audit_id_exists(self, audit_id: str) -> bool:
        return self.value_exists("audit_id", audit_id)
