from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.authgate.api.http.deps import get_dispatcher, get_raw_credential, get_registry
from src.authgate.core.models.credentials import Credential, UserProfile
from src.authgate.tools.dispatcher import ToolDispatcher
from src.authgate.tools.registry import ToolRegistry

router = APIRouter(tags=["tools"])


class ToolInvocationRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)
    profile: UserProfile | None = None


@router.get("/tools")
async def list_tools(registry: ToolRegistry = Depends(get_registry)) -> dict[str, Any]:
    return {
        "tools": [
            {
                "name": spec.name,
                "description": spec.description,
                "requirement": spec.requirement.describe(),
            }
            for spec in registry
        ]
    }


@router.post("/tools/{tool_name}")
async def invoke_tool(
    tool_name: str,
    body: ToolInvocationRequest | None = None,
    raw_credential: str | None = Depends(get_raw_credential),
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    body = body or ToolInvocationRequest()
    credential = None
    if raw_credential is not None:
        credential = Credential(value=raw_credential, profile=body.profile)
    result = await dispatcher.invoke(tool_name, credential, body.arguments)
    return {"tool": tool_name, "result": result}
