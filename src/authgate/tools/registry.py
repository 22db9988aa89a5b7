"""Static table of tools and their capability requirements."""

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from src.authgate.core.errors import ToolNotFoundError
from src.authgate.core.services.auth.authorization import CapabilityRequirement

ToolHandler = Callable[..., Any | Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    requirement: CapabilityRequirement
    handler: ToolHandler
    # Handler receives the caller's AuthenticationContext as ``context``
    wants_context: bool = False


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> ToolSpec:
        if spec.name in self._tools:
            raise ValueError(f"Tool {spec.name!r} is already registered")
        self._tools[spec.name] = spec
        return spec

    def tool(
        self,
        name: str,
        requirement: CapabilityRequirement,
        *,
        description: str = "",
        wants_context: bool = False,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(
                ToolSpec(
                    name=name,
                    description=description or (handler.__doc__ or "").strip(),
                    requirement=requirement,
                    handler=handler,
                    wants_context=wants_context,
                )
            )
            return handler

        return decorator

    def get(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(sorted(self._tools.values(), key=lambda s: s.name))

    def __len__(self) -> int:
        return len(self._tools)
