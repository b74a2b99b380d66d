"""Pydantic schemas for login and session management."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.user import User


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    remember_me: bool = False


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class AuthSession(BaseModel):
    """Issued on login and refresh; the browser keeps it in local storage."""

    user: User
    token: str = Field(..., description="Bearer token for the Authorization header.")
    refresh_token: str = Field(..., description="Token accepted by /v1/auth/refresh.")
    expires_at: int = Field(..., description="UNIX epoch seconds when the token expires.")
