import base64
import itertools
import time
from collections.abc import Callable
from typing import Any

from authlib.jose import jwt


def oct_jwk(key: bytes, kid: str) -> dict[str, str]:
    return {
        "kty": "oct",
        "k": base64.urlsafe_b64encode(key).rstrip(b"=").decode("ascii"),
        "alg": "HS256",
        "kid": kid,
    }


def make_token(
    claims: dict[str, Any],
    key: str | bytes,
    *,
    alg: str = "HS256",
    kid: str | None = None,
    expires_in: int = 3600,
) -> str:
    """Sign ``claims``, adding iat/exp unless the caller set them."""
    now = int(time.time())
    payload = {"iat": now, "exp": now + expires_in, **claims}
    header: dict[str, Any] = {"alg": alg}
    if kid:
        header["kid"] = kid
    return jwt.encode(header, payload, key).decode("ascii")


def sequence_generator(*values: str) -> Callable[[], str]:
    """Deterministic stand-in for uuid.uuid4; repeats the last value forever."""
    it = itertools.chain(values, itertools.repeat(values[-1]))
    return lambda: next(it)
