"""
SprintSpace Backend — AuthGuard Unit Tests
============================================
"""

import pytest
from starlette.requests import Request

from sprintspace.config import Settings
from sprintspace.exceptions import InvalidCredentialError, UnauthenticatedError
from sprintspace.services.auth_service import AuthGuard


def _request(headers):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


class TestAuthGuard:

    def setup_method(self):
        self.cookie_guard = AuthGuard(Settings(jwt_secret="unit-secret", auth_transport="cookie"))
        self.header_guard = AuthGuard(Settings(jwt_secret="unit-secret", auth_transport="header"))

    def test_token_carries_email_and_expiry(self):
        identity = self.cookie_guard.decode_token(self.cookie_guard.create_token("a@example.com"))
        assert identity.email == "a@example.com"
        assert identity.claims["exp"] - identity.claims["iat"] == 5 * 3600

    def test_bearer_prefix_is_stripped(self):
        token = self.header_guard.create_token("a@example.com")
        assert self.header_guard.decode_token(f"Bearer {token}").email == "a@example.com"

    def test_missing_cookie(self):
        with pytest.raises(UnauthenticatedError):
            self.cookie_guard.authenticate(_request({}))

    def test_cookie_transport_ignores_header(self):
        token = self.cookie_guard.create_token("a@example.com")
        with pytest.raises(UnauthenticatedError):
            self.cookie_guard.authenticate(_request({"Authorization": f"Bearer {token}"}))

    def test_header_transport(self):
        token = self.header_guard.create_token("a@example.com")
        identity = self.header_guard.authenticate(_request({"Authorization": f"Bearer {token}"}))
        assert identity.email == "a@example.com"

    def test_token_signed_elsewhere_is_rejected(self):
        other = AuthGuard(Settings(jwt_secret="other-secret"))
        with pytest.raises(InvalidCredentialError, match="Invalid token"):
            self.cookie_guard.decode_token(other.create_token("a@example.com"))

    def test_login_disabled_without_password(self):
        guard = AuthGuard(Settings(jwt_secret="unit-secret", login_email="a@example.com", login_password=""))
        with pytest.raises(InvalidCredentialError):
            guard.check_login("a@example.com", "")

    def test_login_email_is_case_insensitive(self):
        guard = AuthGuard(Settings(jwt_secret="unit-secret", login_email="a@example.com", login_password="pw"))
        guard.check_login("A@Example.com", "pw")
