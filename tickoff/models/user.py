"""Signed-in account for tickoff."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    """An account that owns tasks; its id is the identity tasks are scoped by."""

    id: str = Field(..., description="Stable account id (UUID v4)")
    email: str = Field(..., description="Login name, usually an email address")
    name: Optional[str] = Field(None, description="Display name")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Account last update timestamp")

    @property
    def display_name(self) -> str:
        return self.name or self.email
