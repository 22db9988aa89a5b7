import inspect
from typing import Any

from loguru import logger

from src.authgate.core.errors import AuthenticationError, ToolError, ToolReason
from src.authgate.core.models.auth_context import AuthenticationContext
from src.authgate.core.models.credentials import Credential
from src.authgate.core.services.auth.authorization import AuthorizationGate
from src.authgate.core.services.auth.identity_resolver import IdentityResolver
from src.authgate.tools.registry import ToolRegistry, ToolSpec


class ToolDispatcher:
    """Runs a tool only after its caller has been resolved and authorized."""

    def __init__(
        self,
        registry: ToolRegistry,
        resolver: IdentityResolver,
        gate: AuthorizationGate,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._gate = gate

    async def invoke(
        self,
        tool_name: str,
        credential: Credential | None,
        arguments: dict[str, Any] | None = None,
    ) -> Any:
        spec = self._registry.get(tool_name)

        try:
            context = await self._resolver.resolve_identity(credential)
        except AuthenticationError as exc:
            self._gate.record_authentication_failure(
                exc, tool_name=tool_name, mode=self._resolver.mode
            )
            raise

        self._gate.authorize(context, spec.requirement, tool_name=tool_name)
        logger.debug("Running tool {} for {}", tool_name, context.display_name())
        return await self._run(spec, context, arguments or {})

    async def _run(
        self, spec: ToolSpec, context: AuthenticationContext, arguments: dict[str, Any]
    ) -> Any:
        kwargs = dict(arguments)
        if spec.wants_context:
            kwargs["context"] = context
        try:
            inspect.signature(spec.handler).bind(**kwargs)
        except TypeError as exc:
            raise ToolError(
                ToolReason.INVALID_ARGUMENTS, f"Invalid arguments for {spec.name}: {exc}"
            ) from exc

        result = spec.handler(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
