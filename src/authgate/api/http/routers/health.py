from typing import Any

from fastapi import APIRouter, Depends

from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.api.http.deps import get_app_dependencies

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(deps: ApplicationDependencies = Depends(get_app_dependencies)) -> dict[str, Any]:
    """Health check endpoint."""
    database_ok = deps.database_service.health_check()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unavailable",
        "auth_mode": deps.mode.value,
    }
