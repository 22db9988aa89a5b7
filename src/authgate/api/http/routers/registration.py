from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.authgate.api.http.deps import get_identity_store
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.identity_profiles import RegistrationProfile
from src.authgate.core.services.identity.record_store import IdentityRecordStore

router = APIRouter(tags=["registration"])


class RegistrationResponse(BaseModel):
    identifier: str
    name: str
    email: str
    created: bool


@router.post("/register")
async def register(
    profile: RegistrationProfile,
    store: IdentityRecordStore = Depends(get_identity_store),
) -> RegistrationResponse:
    """Issue a GUID for a name and email; a known email gets its existing GUID."""
    if store.mode is not AuthenticationMode.DISABLED:
        raise HTTPException(
            status_code=404, detail="Registration is only available when authentication is disabled"
        )
    record, created = store.register_disabled_identity(profile)
    return RegistrationResponse(
        identifier=record.identifier, name=record.name, email=record.email, created=created
    )
