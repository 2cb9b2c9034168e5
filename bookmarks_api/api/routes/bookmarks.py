from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.core.deps import require_owner_id
from bookmarks_api.db.session import get_async_session
from bookmarks_api.repositories.bookmarks import (
    ALL_BOOKMARK_RELATIONS,
    BookmarkOrderKey,
    BookmarkRelations,
    BookmarkRepository,
)
from bookmarks_api.schemas.bookmarks import BookmarkRead
from bookmarks_api.schemas.common import CountResponse

router = APIRouter(prefix="/bookmarks", tags=["Bookmarks"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[BookmarkRead],
    summary="List bookmarks",
    description="List the current user's bookmarks with optional category/flagged/read filters, sorting and paging.",
)
async def list_bookmarks(
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
    category_id: Optional[int] = Query(None, description="Only bookmarks of this category"),
    flagged: Optional[bool] = Query(None, description="Only flagged (true) or unflagged (false)"),
    read: Optional[bool] = Query(None, description="Only read (true) or unread (false)"),
    order_by: Optional[BookmarkOrderKey] = Query(None, description="Sort key"),
    order_direction: Optional[Literal["asc", "desc"]] = Query(None, description="Sort direction, desc unless 'asc'"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Page size"),
    page: Optional[int] = Query(None, ge=1, description="1-based page; needs limit"),
    expand: Optional[List[BookmarkRelations]] = Query(None, description="Relations to embed (default: all)"),
) -> List[BookmarkRead]:
    """
    Return the user's bookmarks.

    Returns:
        List[BookmarkRead]: Bookmarks with the requested relations embedded.
    """
    repo = BookmarkRepository(session)
    return await repo.get_bookmarks_by_user_id(
        owner_id,
        category_id=category_id,
        flagged=flagged,
        read=read,
        order_by=order_by,
        order_direction=order_direction,
        limit=limit,
        page=page,
        relations=ALL_BOOKMARK_RELATIONS if expand is None else expand,
    )


# PUBLIC_INTERFACE
@router.get("/count", response_model=CountResponse, summary="Count bookmarks")
async def count_bookmarks(
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> CountResponse:
    count = await BookmarkRepository(session).fetch_bookmark_count_by_user_id(owner_id)
    return CountResponse(count=count)


# PUBLIC_INTERFACE
@router.get("/{bookmark_id}", response_model=BookmarkRead, summary="Get bookmark")
async def get_bookmark(
    bookmark_id: int,
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> BookmarkRead:
    bookmark = await BookmarkRepository(session).get_bookmark_by_id(bookmark_id, owner_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return bookmark
