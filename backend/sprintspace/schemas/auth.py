"""SprintSpace Backend — Authentication Schemas"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """
    Body of POST /jwt.

    Accepted shapes:
        {"email": "runner@example.com"}
        {"user": {"email": "runner@example.com", ...}}
        {"user": "runner@example.com"}
    """
    email: Optional[str] = None
    user: Optional[Union[str, Dict[str, Any]]] = None

    def resolve_email(self) -> Optional[str]:
        if self.email:
            return self.email.strip() or None
        if isinstance(self.user, str):
            return self.user.strip() or None
        if isinstance(self.user, dict):
            email = self.user.get("email")
            if isinstance(email, str) and email.strip():
                return email.strip()
        return None


class LoginRequest(BaseModel):
    """Body of POST /login."""
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    success: Optional[str] = None
    token: str


class LogoutResponse(BaseModel):
    success: str = "Logged out"
