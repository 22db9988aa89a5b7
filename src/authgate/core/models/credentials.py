"""Inbound credential as handed to the active mode validator."""

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Caller-supplied profile fields, unvalidated.

    Only Disabled mode uses them, and only on first contact.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    email: str | None = None
    organization: str | None = None
    session_id: str | None = None


class Credential(BaseModel):
    """A credential presented with one tool invocation.

    ``value`` is a self-issued identifier in Disabled mode and a bearer token
    in the other modes. ``None`` means the caller presented nothing.
    """

    model_config = ConfigDict(frozen=True)

    value: str | None = Field(default=None, repr=False)
    profile: UserProfile | None = None

    @property
    def is_empty(self) -> bool:
        return self.value is None or not self.value.strip()
