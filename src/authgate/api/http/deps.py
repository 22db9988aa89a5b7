"""FastAPI dependency implementations."""

from fastapi import Request

from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.tools.dispatcher import ToolDispatcher
from src.authgate.tools.registry import ToolRegistry

USER_GUID_HEADER = "X-User-Guid"


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_dispatcher(request: Request) -> ToolDispatcher:
    """Get the tool dispatcher instance."""
    return get_app_dependencies(request).dispatcher


def get_registry(request: Request) -> ToolRegistry:
    """Get the tool registry instance."""
    return get_app_dependencies(request).registry


def get_identity_store(request: Request) -> IdentityRecordStore:
    """Get the identity record store for the active mode."""
    return get_app_dependencies(request).identity_store


def get_raw_credential(request: Request) -> str | None:
    """Read the credential the active mode expects from the request headers.

    Disabled mode reads the caller's GUID from ``X-User-Guid``; the other
    modes read an ``Authorization: Bearer`` token.
    """
    mode = get_app_dependencies(request).mode
    if mode is AuthenticationMode.DISABLED:
        value = request.headers.get(USER_GUID_HEADER)
        return value if value and value.strip() else None

    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.strip():
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    # Other schemes reach the validator, which rejects and audits them
    return authorization.strip()
