from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.core.deps import require_owner_id
from bookmarks_api.db.session import get_async_session
from bookmarks_api.repositories.categories import (
    ALL_CATEGORY_RELATIONS,
    CategoryOrderKey,
    CategoryRelations,
    CategoryRepository,
)
from bookmarks_api.schemas.categories import CategoryRead
from bookmarks_api.schemas.common import CountResponse

router = APIRouter(prefix="/categories", tags=["Categories"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[CategoryRead],
    summary="List categories",
    description="List the current user's categories, optionally sorted and paged.",
)
async def list_categories(
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
    order_by: Optional[CategoryOrderKey] = Query(None, description="Sort key"),
    order_direction: Optional[Literal["asc", "desc"]] = Query(None, description="Sort direction, desc unless 'asc'"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Page size"),
    page: Optional[int] = Query(None, ge=1, description="1-based page; needs limit"),
    expand: Optional[List[CategoryRelations]] = Query(None, description="Relations to embed (default: all)"),
) -> List[CategoryRead]:
    repo = CategoryRepository(session)
    return await repo.get_categories_by_user_id(
        owner_id,
        order_by=order_by,
        order_direction=order_direction,
        limit=limit,
        page=page,
        relations=ALL_CATEGORY_RELATIONS if expand is None else expand,
    )


# PUBLIC_INTERFACE
@router.get("/count", response_model=CountResponse, summary="Count categories")
async def count_categories(
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> CountResponse:
    count = await CategoryRepository(session).fetch_category_count_by_user_id(owner_id)
    return CountResponse(count=count)


# PUBLIC_INTERFACE
@router.get("/{category_id}", response_model=CategoryRead, summary="Get category")
async def get_category(
    category_id: int,
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
    expand: Optional[List[CategoryRelations]] = Query(None, description="Relations to embed (default: all)"),
) -> CategoryRead:
    """
    Return one of the current user's categories.

    Raises:
        HTTPException: 404 when the user has no such category.
    """
    category = await CategoryRepository(session).get_category_by_id(
        category_id, owner_id, relations=ALL_CATEGORY_RELATIONS if expand is None else expand
    )
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
