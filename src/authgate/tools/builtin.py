"""Tools every deployment ships with."""

from typing import Any

from src.authgate.core.errors import ToolError, ToolReason
from src.authgate.core.models.auth_context import AuthenticationContext
from src.authgate.core.services.auth.authorization import (
    ALLOW_ANONYMOUS,
    CapabilityRequirement,
)
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.tools import roles
from src.authgate.tools.registry import ToolRegistry, ToolSpec


def _number(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ToolError(ToolReason.INVALID_ARGUMENTS, f"{name} must be a number") from exc


def multiply(a: float, b: float) -> float:
    """Multiplies two numbers and returns the result."""
    return _number(a, "a") * _number(b, "b")


def convert_temperature(value: float, from_unit: str = "celsius") -> float:
    """Converts a temperature between Celsius and Fahrenheit."""
    degrees = _number(value, "value")
    if not isinstance(from_unit, str):
        raise ToolError(ToolReason.INVALID_ARGUMENTS, "from_unit must be a string")
    unit = from_unit.strip().lower()
    if unit in ("c", "celsius"):
        return degrees * 9 / 5 + 32
    if unit in ("f", "fahrenheit"):
        return (degrees - 32) * 5 / 9
    raise ToolError(
        ToolReason.INVALID_ARGUMENTS, "from_unit must be 'celsius' or 'fahrenheit'"
    )


def whoami(context: AuthenticationContext) -> dict[str, Any]:
    """Describes the caller as the server sees them."""
    return {
        "is_authenticated": context.is_authenticated,
        "display_name": context.display_name(),
        "subject_id": context.subject_id,
        "roles": sorted(context.roles),
        "mode": context.mode.value if context.mode else None,
        "audit_id": context.audit_id,
    }


def register_builtin_tools(registry: ToolRegistry, store: IdentityRecordStore) -> ToolRegistry:
    registry.register(
        ToolSpec("multiply", multiply.__doc__, ALLOW_ANONYMOUS, multiply)
    )
    registry.register(
        ToolSpec(
            "convert_temperature",
            convert_temperature.__doc__,
            ALLOW_ANONYMOUS,
            convert_temperature,
        )
    )
    registry.register(
        ToolSpec("whoami", whoami.__doc__, ALLOW_ANONYMOUS, whoami, wants_context=True)
    )

    @registry.tool(
        "lookup_audit_identity",
        CapabilityRequirement(any_of=roles.SENSITIVE_OPERATION_ROLES),
    )
    def lookup_audit_identity(audit_id: str) -> dict[str, Any]:
        """Looks up the identity record behind an audit id."""
        record = store.get_by_audit_id(str(audit_id).strip())
        if record is None:
            return {"audit_id": audit_id, "found": False}
        return {"audit_id": audit_id, "found": True, "record": record.model_dump(mode="json")}

    return registry
