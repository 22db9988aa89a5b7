"""OAuth-mode identity database table model."""

from sqlalchemy import JSON, Column, String, UniqueConstraint
from sqlmodel import Field

from src.authgate.entities.core._base import EntityTable


class OAuthIdentityTable(EntityTable, table=True):
    """Database persistence model for federated identities."""

    __tablename__ = "oauth_identity"
    __table_args__ = (
        UniqueConstraint("audit_id", name="uq_oauth_identity_audit_id"),
    )

    object_id: str = Field(sa_column=Column(String(512), primary_key=True))
    tenant_id: str = Field(sa_column=Column(String(128), nullable=False, index=True))
    email: str | None = Field(
        default=None, sa_column=Column(String(320), nullable=True)
    )
    display_name: str | None = Field(
        default=None, sa_column=Column(String(200), nullable=True)
    )
    granted_scopes: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    roles: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    audit_id: str = Field(sa_column=Column(String(36), nullable=False))
