"""Request/response models for the sign-in endpoints."""

from pydantic import BaseModel, Field

from tickoff.models.user import User


class LoginRequest(BaseModel):
    """Username/password sign-in for the configured account."""
    username: str = Field(..., min_length=1, description="Account login name")
    password: str = Field(..., description="Account password")


class AuthResponse(BaseModel):
    """Bearer token issued on sign-in."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: User
