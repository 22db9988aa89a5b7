from abc import ABC, abstractmethod
from typing import Any

import httpx
from cachetools import TTLCache
from loguru import logger


class JWKSCache(ABC):
    @abstractmethod
    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        """
        Get JWKS for the given endpoint from cache.

        Args:
            jwks_uri: The JWKS endpoint URL

        Returns:
            JWKS dictionary, empty when not cached
        """
        raise NotImplementedError

    @abstractmethod
    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        """
        Set JWKS for the given endpoint in cache.

        Args:
            jwks_uri: The JWKS endpoint URL
            jwks: The JWKS dictionary to cache
        """
        raise NotImplementedError

    @abstractmethod
    def clear_jwks_cache(self) -> None:
        """Clear the JWKS cache."""
        raise NotImplementedError


class JWKSCacheInMemory(JWKSCache):
    def __init__(self, ttl: int = 3600, maxsize: int = 10) -> None:
        self._cache: TTLCache[str, dict[str, Any]] = TTLCache(maxsize=maxsize, ttl=ttl)

    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        return self._cache.get(jwks_uri, {})

    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        self._cache[jwks_uri] = jwks

    def clear_jwks_cache(self) -> None:
        self._cache.clear()


class JwksService:
    """Fetches provider key sets over HTTP, caching successful responses."""

    def __init__(
        self,
        cache: JWKSCache,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cache = cache
        self._timeout = timeout
        self._transport = transport

    async def fetch_jwks(self, jwks_uri: str) -> dict[str, Any]:
        """Return the key set at ``jwks_uri``.

        Raises:
            httpx.HTTPError: On transport failures and non-2xx responses.
            ValueError: If the response is not a JWKS document.
        """
        jwks = self._cache.get_jwks(jwks_uri)
        if jwks:
            return jwks

        logger.debug("Fetching JWKS from {}", jwks_uri)
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            resp = await client.get(jwks_uri)
            resp.raise_for_status()
            jwks = resp.json()

        if not isinstance(jwks, dict) or not isinstance(jwks.get("keys"), list):
            raise ValueError("JWKS response has no 'keys' array")
        self._cache.set_jwks(jwks_uri, jwks)
        return jwks
