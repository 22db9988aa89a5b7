"""Validated profile data used to create or refresh identity records."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegistrationProfile(BaseModel):
    """Profile required on first contact in Disabled mode."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    email: EmailStr = Field(max_length=320)
    organization: str | None = Field(default=None, max_length=200)
    session_id: str | None = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()


class AuthenticatedProfile(BaseModel):
    """Claims taken from a verified bearer token."""

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    display_name: str | None = None
    roles: tuple[str, ...] = ()


class OAuthProfile(BaseModel):
    """Claims taken from a verified provider token."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    email: str | None = None
    display_name: str | None = None
    granted_scopes: tuple[str, ...] = ()
    roles: tuple[str, ...] = ()


IdentityProfile = RegistrationProfile | AuthenticatedProfile | OAuthProfile
