"""Token verification against an external OAuth identity provider.

Two strategies are supported: signature verification with the provider's
published key set (JWKS), and RFC 7662 token introspection. Every provider
call is bounded by ``oauth.timeout_seconds``; timeouts and outages are retried
``oauth.provider_retries`` times and then fail closed.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from authlib.jose import JoseError, JsonWebKey, JsonWebToken
from loguru import logger

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.services.jwt.jwks import JWKSCacheInMemory, JwksService
from src.authgate.core.services.jwt.jwt_utils import (
    preview_jwt,
    require_allowed_algorithm,
)
from src.authgate.runtime.config.config_data import OAuthAuthConfig

T = TypeVar("T")


async def call_with_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    retries: int,
    timeout: float,
    what: str,
) -> T:
    """Run ``operation`` with a per-attempt timeout, retrying provider failures.

    Raises:
        AuthenticationError: PROVIDER_UNAVAILABLE once every attempt failed.
    """
    last_error: Exception | None = None
    for attempt in range(1, retries + 2):
        try:
            return await asyncio.wait_for(operation(), timeout)
        except (TimeoutError, httpx.HTTPError, ValueError) as exc:
            last_error = exc
            logger.warning(
                "{} attempt {}/{} failed: {}: {}",
                what,
                attempt,
                retries + 1,
                type(exc).__name__,
                exc,
            )
    raise AuthenticationError(
        AuthenticationReason.PROVIDER_UNAVAILABLE,
        f"{what} unavailable after {retries + 1} attempts",
    ) from last_error


def _as_list(v: Any) -> list[Any]:
    return [v] if isinstance(v, str) else list(v or ())


class TokenVerifier(ABC):
    @abstractmethod
    async def verify(self, token: str) -> dict[str, Any]:
        """Return the verified claims of ``token``.

        Raises:
            AuthenticationError: INVALID_TOKEN or PROVIDER_UNAVAILABLE.
        """
        raise NotImplementedError


class JwksTokenVerifier(TokenVerifier):
    """Verifies provider-signed JWTs with keys from the provider's JWKS endpoint."""

    def __init__(self, config: OAuthAuthConfig, jwks_service: JwksService) -> None:
        if not config.jwks_uri:
            raise ValueError("JwksTokenVerifier needs oauth.jwks_uri")
        self._config = config
        self._jwks_service = jwks_service
        self._jwt = JsonWebToken(list(config.allowed_algorithms))

        claims_options: dict[str, Any] = {
            "aud": {"essential": True, "value": config.client_id},
            "exp": {"essential": True},
        }
        if config.issuer:
            claims_options["iss"] = {"essential": True, "value": config.issuer}
        self._claims_options = claims_options

    async def verify(self, token: str) -> dict[str, Any]:
        cfg = self._config
        pv = preview_jwt(token)
        require_allowed_algorithm(pv, cfg.allowed_algorithms)

        jwks = await call_with_retries(
            lambda: self._jwks_service.fetch_jwks(cfg.jwks_uri),
            retries=cfg.provider_retries,
            timeout=cfg.timeout_seconds,
            what="JWKS fetch",
        )

        try:
            key_set = JsonWebKey.import_key_set(jwks)
            claims = self._jwt.decode(token, key_set, claims_options=self._claims_options)
            claims.validate(leeway=cfg.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.info("Provider token rejected: {}", exc)
            raise AuthenticationError(
                AuthenticationReason.INVALID_TOKEN, f"JWT error: {exc}"
            ) from exc
        return dict(claims)


class IntrospectionTokenVerifier(TokenVerifier):
    """Asks the provider whether a token is active (RFC 7662)."""

    def __init__(
        self,
        config: OAuthAuthConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.introspection_endpoint:
            raise ValueError("IntrospectionTokenVerifier needs oauth.introspection_endpoint")
        self._config = config
        self._transport = transport

    async def _introspect(self, token: str) -> dict[str, Any]:
        cfg = self._config
        auth = (cfg.client_id, cfg.client_secret) if cfg.client_secret else None
        async with httpx.AsyncClient(
            timeout=cfg.timeout_seconds, transport=self._transport
        ) as client:
            resp = await client.post(
                cfg.introspection_endpoint,
                data={"token": token, "token_type_hint": "access_token"},
                auth=auth,
            )
            resp.raise_for_status()
            body = resp.json()
        if not isinstance(body, dict):
            raise ValueError("Introspection response must be a JSON object")
        return body

    async def verify(self, token: str) -> dict[str, Any]:
        cfg = self._config
        claims = await call_with_retries(
            lambda: self._introspect(token),
            retries=cfg.provider_retries,
            timeout=cfg.timeout_seconds,
            what="Token introspection",
        )

        if claims.get("active") is not True:
            raise AuthenticationError(
                AuthenticationReason.INVALID_TOKEN, "Token is not active"
            )
        if "aud" in claims and cfg.client_id not in _as_list(claims["aud"]):
            raise AuthenticationError(AuthenticationReason.INVALID_TOKEN, "Invalid audience")
        if cfg.issuer and claims.get("iss") and claims["iss"].rstrip("/") != cfg.issuer.rstrip("/"):
            raise AuthenticationError(AuthenticationReason.INVALID_TOKEN, "Invalid issuer")
        exp = claims.get("exp")
        if isinstance(exp, (int, float)) and exp < time.time() - cfg.clock_skew:
            raise AuthenticationError(AuthenticationReason.INVALID_TOKEN, "Token expired")
        return claims


def build_token_verifier(
    config: OAuthAuthConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TokenVerifier:
    """JWKS verification when a key set is published, introspection otherwise."""
    if config.jwks_uri:
        jwks_service = JwksService(
            JWKSCacheInMemory(ttl=config.jwks_cache_ttl),
            timeout=config.timeout_seconds,
            transport=transport,
        )
        return JwksTokenVerifier(config, jwks_service)
    return IntrospectionTokenVerifier(config, transport=transport)
