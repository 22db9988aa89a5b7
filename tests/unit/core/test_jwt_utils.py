import base64
import json

import pytest

from src.authgate.core.errors import AuthenticationError, AuthenticationReason
from src.authgate.core.services.jwt.jwt_utils import (
    MAX_JWT_CHARS,
    extract_roles,
    extract_scopes,
    first_claim,
    preview_jwt,
    require_allowed_algorithm,
)
from tests.utils import make_token


def _segment(obj) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


class TestPreviewJwt:
    def test_reads_header_and_claims(self, signing_key: str):
        token = make_token({"iss": "https://issuer.test/", "sub": "u1"}, signing_key, kid="k1")
        pv = preview_jwt(token)

        assert pv.alg == "HS256"
        assert pv.kid == "k1"
        assert pv.iss == "https://issuer.test"
        assert pv.claims["sub"] == "u1"

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "not-a-jwt",
            "a.b",
            "a.b.c.d",
            "a..c",
            "abc.def.ghi=",
            "x" * (MAX_JWT_CHARS + 1),
        ],
    )
    def test_rejects_malformed_tokens(self, token: str):
        with pytest.raises(AuthenticationError) as exc_info:
            preview_jwt(token)
        assert exc_info.value.reason is AuthenticationReason.INVALID_TOKEN

    def test_rejects_non_object_payload(self):
        token = f"{_segment({'alg': 'HS256'})}.{_segment([1, 2])}.sig"
        with pytest.raises(AuthenticationError, match="JSON object"):
            preview_jwt(token)


class TestRequireAllowedAlgorithm:
    def test_allowed(self, signing_key: str):
        require_allowed_algorithm(preview_jwt(make_token({}, signing_key)), ("HS256",))

    def test_not_in_allow_list(self, signing_key: str):
        pv = preview_jwt(make_token({}, signing_key))
        with pytest.raises(AuthenticationError, match="algorithm"):
            require_allowed_algorithm(pv, ("RS256",))

    def test_none_is_never_allowed(self):
        token = f"{_segment({'alg': 'none'})}.{_segment({'sub': 'u1'})}.x"
        with pytest.raises(AuthenticationError):
            require_allowed_algorithm(preview_jwt(token), ("none", "HS256"))


class TestClaimExtraction:
    def test_scopes_from_all_claims(self):
        claims = {"scope": "a b", "scp": ["b", "c"], "scopes": ["d"]}
        assert extract_scopes(claims) == ["a", "b", "c", "d"]

    def test_scp_string(self):
        assert extract_scopes({"scp": "Admin.All Sales.ReadWrite"}) == [
            "Admin.All",
            "Sales.ReadWrite",
        ]

    def test_roles_from_nested_claims(self):
        claims = {
            "roles": ["Admin", "Sales"],
            "groups": "Sales ReadOnly",
            "realm_access": {"roles": ["CustomerService"]},
        }
        assert extract_roles(claims) == ["Admin", "Sales", "ReadOnly", "CustomerService"]

    def test_no_roles(self):
        assert extract_roles({"sub": "u1"}) == []

    def test_first_claim(self):
        claims = {"name": "  ", "preferred_username": " ada ", "n": 3}
        assert first_claim(claims, "name", "preferred_username") == "ada"
        assert first_claim(claims, "n", "missing") is None
