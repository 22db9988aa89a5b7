import base64
import json
from dataclasses import dataclass
from typing import Any, Final

from src.authgate.core.errors import AuthenticationError, AuthenticationReason

# ---------------- tunables ----------------
MAX_JWT_CHARS: Final = 8192
MAX_SEGMENT_CHARS: Final = 8192
MAX_HEADER_BYTES: Final = 8 * 1024
MAX_PAYLOAD_BYTES: Final = 64 * 1024
_ALLOWED: Final = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_."
)  # no '='


def _invalid(detail: str) -> AuthenticationError:
    return AuthenticationError(AuthenticationReason.INVALID_TOKEN, detail)


# --------------- one-pass prefilter ---------------
def _prefilter_compact_jwt(token: str) -> tuple[str, str, str]:
    if not token or len(token) > MAX_JWT_CHARS:
        raise _invalid("Invalid JWT size")
    first = second = -1
    for i, ch in enumerate(token):
        if ch not in _ALLOWED:
            raise _invalid("Invalid JWT characters")
        if ch == ".":
            if first < 0:
                first = i
            elif second < 0:
                second = i
            else:  # third dot
                raise _invalid("Invalid JWT format")
    # require exactly two dots and non-empty segments
    if first <= 0 or second - first <= 1 or second >= len(token) - 1:
        raise _invalid("Invalid JWT format")
    h, p, s = token[:first], token[first + 1 : second], token[second + 1 :]
    if max(len(h), len(p), len(s)) > MAX_SEGMENT_CHARS:
        raise _invalid("Invalid JWT segment size")
    return h, p, s


def _b64url_decode_unpadded(seg: str, what: str, max_bytes: int) -> bytes:
    pad = (-len(seg)) % 4
    try:
        raw = base64.urlsafe_b64decode((seg + "=" * pad).encode("ascii"))
    except ValueError as e:
        raise _invalid(f"Invalid base64url in {what}") from e
    if len(raw) > max_bytes:
        raise _invalid(f"{what} too large")
    return raw


def _decode_json_object(raw: bytes, what: str) -> dict[str, Any]:
    try:
        obj = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise _invalid(f"Non-UTF8 {what}") from e
    except json.JSONDecodeError as e:
        raise _invalid(f"Invalid JSON in {what}") from e
    if not isinstance(obj, dict):
        raise _invalid(f"{what} must be a JSON object")
    return obj


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]
    alg: str | None
    kid: str | None
    iss: str | None


def preview_jwt(token: str) -> JwtPreview:
    """Split and decode header+payload exactly once, without verifying."""
    h_seg, p_seg, _ = _prefilter_compact_jwt(token)
    h_raw = _b64url_decode_unpadded(h_seg, "JWT header", MAX_HEADER_BYTES)
    p_raw = _b64url_decode_unpadded(p_seg, "JWT payload", MAX_PAYLOAD_BYTES)
    header = _decode_json_object(h_raw, "JWT header")
    claims = _decode_json_object(p_raw, "JWT payload")
    iss = claims.get("iss")
    if iss and isinstance(iss, str):
        iss = iss.rstrip("/")  # normalize
    else:
        iss = None

    return JwtPreview(
        header=header,
        claims=claims,
        alg=header.get("alg"),
        kid=header.get("kid"),
        iss=iss,
    )


def require_allowed_algorithm(preview: JwtPreview, allowed: tuple[str, ...]) -> None:
    # "none" never passes, whatever the configuration says
    if not preview.alg or preview.alg.lower() == "none" or preview.alg not in allowed:
        raise _invalid("Disallowed JWT algorithm")


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def extract_scopes(claims: dict[str, Any]) -> list[str]:
    """Extract scopes from JWT claims, preserving order.

    Scopes can be in various claims: 'scope' (space-separated), 'scp' (string or array),
    or 'scopes' (array). Returns as a list with deduplication, preserving first occurrence order.
    """
    scopes: list[str] = []

    if "scope" in claims:
        scopes.extend(str(claims["scope"]).split())

    if "scp" in claims:
        value = claims["scp"]
        if isinstance(value, str):
            scopes.extend(value.split())
        elif isinstance(value, (list, tuple)):
            scopes.extend(str(v) for v in value)

    if "scopes" in claims and isinstance(claims["scopes"], (list, tuple)):
        scopes.extend(str(v) for v in claims["scopes"])

    return _dedupe(scopes)


def extract_roles(claims: dict[str, Any]) -> list[str]:
    """Extract roles from JWT claims.

    Roles can be in various claims and nested structures.
    """
    roles: list[str] = []

    for role_claim in ["role", "roles", "groups", "authorities"]:
        value = claims.get(role_claim)
        if value:
            if isinstance(value, list):
                roles.extend(str(v) for v in value)
            elif isinstance(value, str):
                # Handle space-separated roles string
                roles.extend(value.split())
            else:
                roles.append(str(value))

    # Keycloak realm roles
    realm_access = claims.get("realm_access")
    if isinstance(realm_access, dict) and isinstance(realm_access.get("roles"), list):
        roles.extend(str(v) for v in realm_access["roles"])

    return _dedupe(roles)


def first_claim(claims: dict[str, Any], *names: str) -> str | None:
    """Return the first non-empty string claim among ``names``."""
    for name in names:
        value = claims.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
