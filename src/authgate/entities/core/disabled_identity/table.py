"""Disabled-mode identity database table model."""

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field

from src.authgate.entities.core._base import EntityTable


class DisabledModeIdentityTable(EntityTable, table=True):
    """Database persistence model for Disabled-mode identities."""

    __tablename__ = "disabled_mode_identity"
    __table_args__ = (
        UniqueConstraint("email", name="uq_disabled_mode_identity_email"),
    )

    identifier: str = Field(sa_column=Column(String(36), primary_key=True))
    name: str = Field(sa_column=Column(String(200), nullable=False))
    email: str = Field(sa_column=Column(String(320), nullable=False))
    organization: str | None = Field(
        default=None, sa_column=Column(String(200), nullable=True)
    )
    session_id: str | None = Field(
        default=None, sa_column=Column(String(100), nullable=True)
    )
