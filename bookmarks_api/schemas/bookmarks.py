from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .auth import UserSummary
from .categories import CategorySummary


class TagInput(BaseModel):
    """Tag descriptor from a form: a reference to an existing tag (id) or a new name."""
    id: Optional[int] = Field(None, description="Id of an existing tag")
    name: str = Field("", description="Tag name")


class TagRead(BaseModel):
    """Tag read model."""
    id: int = Field(..., description="Tag ID")
    name: str = Field(..., description="Tag name (unique per owner)")
    owner_id: int = Field(..., description="Owning user id")
    created_at: datetime = Field(..., description="Created timestamp")

    class Config:
        from_attributes = True


class FileRead(BaseModel):
    """Stored file read model."""
    id: int = Field(..., description="File ID")
    file_name: str = Field(...)
    size: int = Field(0)
    owner_id: int = Field(...)
    created_at: datetime = Field(...)

    class Config:
        from_attributes = True


class BookmarkRead(BaseModel):
    """Bookmark read model; relations are present only when expanded."""
    id: int = Field(..., description="Bookmark ID")
    url: str = Field(..., description="Bookmarked URL")
    domain: Optional[str] = Field(None)
    title: str = Field(...)
    description: Optional[str] = Field(None)
    author: Optional[str] = Field(None)
    content_text: Optional[str] = Field(None)
    content_html: Optional[str] = Field(None)
    content_type: Optional[str] = Field(None)
    content_published_date: Optional[str] = Field(None)
    main_image_url: Optional[str] = Field(None)
    icon_url: Optional[str] = Field(None)
    main_image_id: Optional[int] = Field(None)
    icon_id: Optional[int] = Field(None)
    note: Optional[str] = Field(None)
    importance: int = Field(0)
    flagged: Optional[datetime] = Field(None)
    read: Optional[datetime] = Field(None)
    opened_times: int = Field(0)
    opened_last: Optional[datetime] = Field(None)
    category_id: Optional[int] = Field(None)
    owner_id: int = Field(...)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)
    owner: Optional[UserSummary] = Field(None)
    category: Optional[CategorySummary] = Field(None)
    tags: Optional[List[TagRead]] = Field(None)
    main_image: Optional[FileRead] = Field(None)
    icon: Optional[FileRead] = Field(None)

    class Config:
        from_attributes = True


class BookmarkCreate(BaseModel):
    """Create bookmark payload (already parsed from the form)."""
    owner_id: int = Field(...)
    url: str = Field(...)
    title: str = Field(...)
    domain: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    author: Optional[str] = Field(None)
    content_text: Optional[str] = Field(None)
    content_html: Optional[str] = Field(None)
    content_type: Optional[str] = Field(None)
    content_published_date: Optional[str] = Field(None)
    main_image_url: Optional[str] = Field(None)
    icon_url: Optional[str] = Field(None)
    main_image_id: Optional[int] = Field(None)
    icon_id: Optional[int] = Field(None)
    note: Optional[str] = Field(None)
    importance: int = Field(0)
    flagged: Optional[datetime] = Field(None)
    category_id: Optional[int] = Field(None)


class BookmarkUpdate(BaseModel):
    """Update bookmark payload; only fields that were set are written."""
    url: Optional[str] = Field(None)
    title: Optional[str] = Field(None)
    domain: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    author: Optional[str] = Field(None)
    content_text: Optional[str] = Field(None)
    content_html: Optional[str] = Field(None)
    content_type: Optional[str] = Field(None)
    content_published_date: Optional[str] = Field(None)
    main_image_url: Optional[str] = Field(None)
    icon_url: Optional[str] = Field(None)
    main_image_id: Optional[int] = Field(None)
    icon_id: Optional[int] = Field(None)
    note: Optional[str] = Field(None)
    importance: Optional[int] = Field(None)
    flagged: Optional[datetime] = Field(None)
    read: Optional[datetime] = Field(None)
    category_id: Optional[int] = Field(None)
