from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .bookmarks import BookmarkCreate, BookmarkUpdate, TagInput


class BookmarkForm(BaseModel):
    """Bookmark fields as submitted by the create/update forms, already parsed."""
    url: Optional[str] = Field(None)
    domain: Optional[str] = Field(None)
    title: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    author: Optional[str] = Field(None)
    content_text: Optional[str] = Field(None)
    content_html: Optional[str] = Field(None)
    content_type: Optional[str] = Field(None)
    content_published_date: Optional[str] = Field(None)
    main_image_url: Optional[str] = Field(None)
    icon_url: Optional[str] = Field(None)
    note: Optional[str] = Field(None)
    importance: int = Field(0)
    flagged: Optional[datetime] = Field(None)
    category_id: Optional[int] = Field(None)
    tags: List[TagInput] = Field(default_factory=list)

    def bookmark_fields(self) -> Dict[str, Any]:
        """Column values for the bookmark row (tags are linked separately)."""
        return self.model_dump(exclude={"tags"})

    def to_create(self, owner_id: int) -> BookmarkCreate:
        """Validated insert payload; raises ValidationError when url or title is missing."""
        return BookmarkCreate(**self.bookmark_fields(), owner_id=owner_id)

    def to_update(self) -> BookmarkUpdate:
        return BookmarkUpdate(**self.bookmark_fields())


class CategoryForm(BaseModel):
    """Category fields as submitted by the create/update forms, already parsed."""
    name: str = Field(...)
    slug: str = Field(...)
    description: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    parent_id: Optional[int] = Field(None)
    archived: Optional[datetime] = Field(None)
    public: Optional[datetime] = Field(None)
