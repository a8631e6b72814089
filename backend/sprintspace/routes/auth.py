"""
SprintSpace Backend — Authentication Routes
=============================================

What:  POST /jwt (issue a token for an email), POST /login (configured
       credentials), POST /logout (clear the cookie).
How:   Tokens are always returned in the body; the HTTP-only cookie is set
       as well so cookie-transport clients need no extra step.
"""

import logging

from fastapi import APIRouter, Depends, Response

from sprintspace.exceptions import ValidationError
from sprintspace.schemas.auth import LoginRequest, LogoutResponse, TokenRequest, TokenResponse
from sprintspace.schemas.common import ErrorResponse
from sprintspace.services.auth_service import AuthGuard, get_auth_guard

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post(
    "/jwt",
    response_model=TokenResponse,
    responses={400: {"description": "No email supplied", "model": ErrorResponse}},
    summary="Issue a signed token for an email",
)
async def issue_token(
    payload: TokenRequest,
    response: Response,
    guard: AuthGuard = Depends(get_auth_guard),
) -> TokenResponse:
    email = payload.resolve_email()
    if not email:
        logger.warning("Token request without an email")
        raise ValidationError(message="An email is required to issue a token", field="email")

    token = guard.create_token(email)
    guard.set_token_cookie(response, token)
    return TokenResponse(success="Token sent", token=token)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in with the configured credentials",
)
async def login(
    payload: LoginRequest,
    response: Response,
    guard: AuthGuard = Depends(get_auth_guard),
) -> TokenResponse:
    guard.check_login(payload.email, payload.password)
    logger.info("Login succeeded for %s", payload.email.strip())
    token = guard.create_token(payload.email.strip())
    guard.set_token_cookie(response, token)
    return TokenResponse(token=token)


@router.post("/logout", response_model=LogoutResponse, summary="Clear the token cookie")
async def logout(
    response: Response,
    guard: AuthGuard = Depends(get_auth_guard),
) -> LogoutResponse:
    guard.clear_token_cookie(response)
    logger.info("Token cookie cleared")
    return LogoutResponse()
