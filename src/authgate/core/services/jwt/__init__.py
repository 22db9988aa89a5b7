from .jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt_utils import JwtPreview, extract_roles, extract_scopes, preview_jwt
from .signing_keys import resolve_signing_key

__all__ = [
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "JwtPreview",
    "extract_roles",
    "extract_scopes",
    "preview_jwt",
    "resolve_signing_key",
]
