from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field


class Theme(str, Enum):
    """UI themes a user can pick; stored in `settings.theme`."""
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class LoginRequest(BaseModel):
    """Password login; identity is a username or an email."""
    identity: str = Field(..., description="Username or email")
    password: str = Field(..., description="Password")


class AdminLoginRequest(BaseModel):
    """Admin password login."""
    email: EmailStr = Field(..., description="Admin email")
    password: str = Field(..., description="Password")


class RegisterRequest(BaseModel):
    """Registration details for creating a new user."""
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=8, description="User password")
    name: Optional[str] = Field(None, description="Display name")


class Message(BaseModel):
    """Simple message response."""
    message: str = Field(...)


class UserRead(BaseModel):
    """User read model."""
    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    email: EmailStr = Field(..., description="User email")
    name: Optional[str] = Field(None)
    verified: bool = Field(False)
    settings: Dict[str, Any] = Field(default_factory=dict, description="User settings, e.g. theme")
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    """Owner info embedded in other read models."""
    id: int = Field(...)
    username: str = Field(...)
    name: Optional[str] = Field(None)

    class Config:
        from_attributes = True


class AdminRead(BaseModel):
    """Admin read model."""
    id: int = Field(..., description="Admin ID")
    email: EmailStr = Field(..., description="Admin email")
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Token plus the authenticated account; the token is also set as the session cookie."""
    token: str = Field(..., description="Session token")
    record: Dict[str, Any] = Field(..., description="Authenticated account")
