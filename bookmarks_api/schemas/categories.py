from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .auth import UserSummary


class CategorySummary(BaseModel):
    """Parent category embedded in a category read model."""
    id: int = Field(...)
    name: str = Field(...)
    slug: str = Field(...)
    color: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)

    class Config:
        from_attributes = True


class CategoryRead(BaseModel):
    """Category read model; owner and parent are present only when expanded."""
    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Name")
    slug: str = Field(..., description="URL slug derived from the name")
    description: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    parent_id: Optional[int] = Field(None, description="Parent category id")
    archived: Optional[datetime] = Field(None, description="When the category was archived")
    public: Optional[datetime] = Field(None, description="When the category was made public")
    initial: bool = Field(False, description="Whether this is the user's default category")
    owner_id: int = Field(..., description="Owning user id")
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")
    owner: Optional[UserSummary] = Field(None)
    parent: Optional[CategorySummary] = Field(None)

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    """Create category payload."""
    name: str = Field(..., description="Name")
    slug: str = Field(..., description="Slug")
    description: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    parent_id: Optional[int] = Field(None)
    archived: Optional[datetime] = Field(None)
    public: Optional[datetime] = Field(None)
    initial: bool = Field(False)
    owner_id: int = Field(..., description="Owning user id")


class CategoryUpdate(BaseModel):
    """Update category payload; only fields that were set are written."""
    name: Optional[str] = Field(None)
    slug: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    parent_id: Optional[int] = Field(None)
    archived: Optional[datetime] = Field(None)
    public: Optional[datetime] = Field(None)
