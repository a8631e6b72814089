"""
SprintSpace Backend — Auth Guard
==================================

What:  Issues and verifies HS256 JWTs and resolves the caller's identity.
How:   One shared secret signs every token with a fixed expiry. The token
       travels either in the HTTP-only `token` cookie or in the Authorization
       header (raw or "Bearer <token>"), chosen by AUTH_TRANSPORT.
Who:   `require_identity` is the FastAPI dependency used by every protected
       route; the auth routes use create_token / cookie helpers.

Failure mapping:
    no credential             → UnauthenticatedError   (401)
    bad signature / malformed → InvalidCredentialError (401)
    expired                   → InvalidCredentialError (401)
"""

import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Request, Response

from sprintspace.config import Settings
from sprintspace.exceptions import InvalidCredentialError, UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, decoded from a verified token."""
    email: str
    claims: Dict[str, Any] = field(default_factory=dict)


class AuthGuard:
    """Token issuing, transport, and verification for one application."""

    def __init__(self, settings: Settings):
        self.settings = settings

    # --- JWT Creation ---
    def create_token(self, email: str, extra_claims: Optional[Dict[str, Any]] = None) -> str:
        """Create a signed JWT for the given email."""
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = dict(extra_claims or {})
        payload.update(
            sub=email,
            email=email,
            iat=now,
            exp=now + timedelta(hours=self.settings.token_expiry_hours),
        )
        token = jwt.encode(payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)
        logger.info("Issued token for %s (expires in %dh)", email, self.settings.token_expiry_hours)
        return token

    # --- JWT Validation ---
    def decode_token(self, token: str) -> Identity:
        """Verify a token and return the identity it carries."""
        if token.startswith("Bearer "):
            token = token.split(" ", 1)[1].strip()

        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired token")
            raise InvalidCredentialError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected invalid token: %s", e)
            raise InvalidCredentialError("Invalid token")

        email = payload.get("email") or payload.get("sub")
        if not isinstance(email, str) or not email:
            raise InvalidCredentialError("Token missing email")
        return Identity(email=email, claims=payload)

    # --- Transport ---
    def extract_token(self, request: Request) -> str:
        if self.settings.auth_transport == "cookie":
            token = request.cookies.get(self.settings.cookie_name)
        else:
            token = request.headers.get("Authorization")
        if not token or not token.strip():
            raise UnauthenticatedError()
        return token.strip()

    def authenticate(self, request: Request) -> Identity:
        return self.decode_token(self.extract_token(request))

    def set_token_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.settings.cookie_name,
            value=token,
            max_age=self.settings.token_expiry_hours * 3600,
            **self.settings.cookie_options,
        )

    def clear_token_cookie(self, response: Response) -> None:
        response.delete_cookie(key=self.settings.cookie_name, **self.settings.cookie_options)

    # --- Configured login ---
    def check_login(self, email: str, password: str) -> None:
        """Compare against LOGIN_EMAIL / LOGIN_PASSWORD in constant time."""
        expected_email = self.settings.login_email
        expected_password = self.settings.login_password
        if not expected_password:
            logger.warning("Login attempt while POST /login is not configured")
            raise InvalidCredentialError("Invalid credentials")

        email_ok = hmac.compare_digest(email.strip().lower().encode(), expected_email.strip().lower().encode())
        password_ok = hmac.compare_digest(password.encode(), expected_password.encode())
        if not (email_ok and password_ok):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentialError("Invalid credentials")


def get_auth_guard(request: Request) -> AuthGuard:
    return request.app.state.auth_guard


async def require_identity(request: Request) -> Identity:
    """
    FastAPI dependency guarding protected routes.

    Stores the identity on request.state.identity and returns it.
    """
    identity = get_auth_guard(request).authenticate(request)
    request.state.identity = identity
    return identity
