from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.core.deps import require_owner_id
from bookmarks_api.db.session import get_async_session
from bookmarks_api.repositories.serialize import serialize_tag
from bookmarks_api.repositories.tags import TagRepository
from bookmarks_api.schemas.bookmarks import TagRead

router = APIRouter(prefix="/tags", tags=["Tags"])


# PUBLIC_INTERFACE
@router.get("", response_model=List[TagRead], summary="List tags", description="List the current user's tags by name.")
async def list_tags(
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> List[TagRead]:
    rows = await TagRepository(session).list_tags_by_user_id(owner_id)
    return [serialize_tag(row) for row in rows]
