"""Error taxonomy for the authentication and authorization pipeline.

Every error carries a machine-readable ``reason`` so callers only ever see a
reason-coded denial. ``status_code`` and ``public_code`` drive the HTTP mapping
registered in :mod:`src.authgate.api.http.app`.
"""

from enum import Enum


class ConfigurationReason(str, Enum):
    INVALID_MODE_CONFIGURATION = "INVALID_MODE_CONFIGURATION"


class AuthenticationReason(str, Enum):
    MALFORMED_IDENTIFIER = "MALFORMED_IDENTIFIER"
    INVALID_PROFILE = "INVALID_PROFILE"
    INVALID_TOKEN = "INVALID_TOKEN"
    TENANT_NOT_ALLOWED = "TENANT_NOT_ALLOWED"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    IDENTITY_STORE_FAILURE = "IDENTITY_STORE_FAILURE"


class AuthorizationReason(str, Enum):
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"


class AuditStoreReason(str, Enum):
    ID_EXHAUSTION = "ID_EXHAUSTION"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    IDENTITY_CONFLICT = "IDENTITY_CONFLICT"


class ToolReason(str, Enum):
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"


class AuthGateError(Exception):
    """Base class for all reason-coded errors."""

    status_code: int = 500
    public_code: str = "internal_error"

    def __init__(self, reason: Enum, message: str | None = None):
        self.reason = reason
        self.message = message or reason.value
        super().__init__(f"{reason.value}: {self.message}")

    def to_payload(self) -> dict[str, str]:
        return {
            "error": self.public_code,
            "reason": self.reason.value,
            "message": self.message,
        }


class ConfigurationError(AuthGateError):
    """Startup configuration is inconsistent with the selected mode."""

    status_code = 500
    public_code = "misconfigured"

    def __init__(self, message: str):
        super().__init__(ConfigurationReason.INVALID_MODE_CONFIGURATION, message)


class AuthenticationError(AuthGateError):
    status_code = 401
    public_code = "unauthenticated"

    def __init__(self, reason: AuthenticationReason, message: str | None = None):
        super().__init__(reason, message)


class AuthorizationError(AuthGateError):
    status_code = 403
    public_code = "forbidden"

    def __init__(self, reason: AuthorizationReason, message: str | None = None):
        super().__init__(reason, message)


class AuditStoreError(AuthGateError):
    """Identity store or audit sink could not complete an operation.

    Callers see it as an authentication denial with ``IDENTITY_STORE_FAILURE``.
    """

    status_code = AuthenticationError.status_code
    public_code = AuthenticationError.public_code

    def __init__(self, reason: AuditStoreReason, message: str | None = None):
        super().__init__(reason, message)

    def to_payload(self) -> dict[str, str]:
        return {
            "error": self.public_code,
            "reason": AuthenticationReason.IDENTITY_STORE_FAILURE.value,
            "message": f"Identity could not be confirmed ({self.reason.value})",
        }


class ToolError(AuthGateError):
    status_code = 400
    public_code = "bad_request"

    def __init__(self, reason: ToolReason, message: str | None = None):
        super().__init__(reason, message)


class ToolNotFoundError(ToolError):
    status_code = 404
    public_code = "not_found"

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(ToolReason.UNKNOWN_TOOL, f"Unknown tool: {tool_name}")
