from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .bookmarks import BookmarkRead


# PUBLIC_INTERFACE
class ActionResult(BaseModel):
    """
    Result record returned by every form action.

    Actions always answer with HTTP 200; `success` carries the outcome and
    unset fields are left out of the response body.
    """
    success: bool = Field(..., description="Whether the action was applied")
    error: Optional[str] = Field(default=None, description="Failure reason")
    id: Optional[int] = Field(default=None, description="Id of the affected row")
    bookmark: Optional[BookmarkRead] = Field(default=None, description="Created or updated bookmark")
