from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Literal, Optional, Sequence

from sqlalchemy import delete, func, select, update

from bookmarks_api.db.models import Bookmark, BookmarkTag
from bookmarks_api.schemas.bookmarks import BookmarkCreate, BookmarkRead, BookmarkUpdate
from .base import BaseRepository, order_clause, page_offset, relation_options
from .serialize import serialize_bookmark


class BookmarkRelations(str, Enum):
    OWNER = "owner"
    CATEGORY = "category"
    TAGS = "tags"
    MAIN_IMAGE = "main_image"
    ICON = "icon"


ALL_BOOKMARK_RELATIONS: List[BookmarkRelations] = list(BookmarkRelations)

BookmarkOrderKey = Literal["created", "title", "domain", "importance", "opened_last"]

_ORDER_KEYS = {
    "created": Bookmark.created_at,
    "title": Bookmark.title,
    "domain": Bookmark.domain,
    "importance": Bookmark.importance,
    "opened_last": Bookmark.opened_last,
}


class BookmarkRepository(BaseRepository):
    """Repository for bookmarks and their tag links. Every statement is scoped by owner_id."""

    async def get_bookmark_by_id(
        self,
        bookmark_id: int,
        owner_id: int,
        relations: Sequence[BookmarkRelations] = ALL_BOOKMARK_RELATIONS,
    ) -> Optional[BookmarkRead]:
        stmt = (
            select(Bookmark)
            .where(Bookmark.id == bookmark_id, Bookmark.owner_id == owner_id)
            .options(*relation_options(Bookmark, relations))
            .execution_options(populate_existing=True)
        )
        row = await self.scalar_one_or_none(stmt)
        return serialize_bookmark(row) if row else None

    async def get_bookmarks_by_user_id(
        self,
        user_id: int,
        *,
        category_id: Optional[int] = None,
        flagged: Optional[bool] = None,
        read: Optional[bool] = None,
        order_by: Optional[BookmarkOrderKey] = None,
        order_direction: Optional[Literal["asc", "desc"]] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
        relations: Sequence[BookmarkRelations] = ALL_BOOKMARK_RELATIONS,
    ) -> List[BookmarkRead]:
        stmt = (
            select(Bookmark)
            .where(Bookmark.owner_id == user_id)
            .options(*relation_options(Bookmark, relations))
            .execution_options(populate_existing=True)
        )
        if category_id is not None:
            stmt = stmt.where(Bookmark.category_id == category_id)
        if flagged is not None:
            stmt = stmt.where(Bookmark.flagged.is_not(None) if flagged else Bookmark.flagged.is_(None))
        if read is not None:
            stmt = stmt.where(Bookmark.read.is_not(None) if read else Bookmark.read.is_(None))
        if order_by:
            stmt = stmt.order_by(order_clause(_ORDER_KEYS[order_by], order_direction))
        if limit:
            stmt = stmt.limit(limit)
        offset = page_offset(page, limit)
        if offset:
            stmt = stmt.offset(offset)
        res = await self.scalars(stmt)
        return [serialize_bookmark(row) for row in res]

    async def fetch_bookmark_count_by_user_id(self, user_id: int) -> int:
        stmt = select(func.count(Bookmark.id)).where(Bookmark.owner_id == user_id)
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def create_bookmark(self, payload: BookmarkCreate) -> BookmarkRead:
        row = Bookmark(**payload.model_dump())
        await self.add(row)
        await self.flush()
        return await self.get_bookmark_by_id(row.id, row.owner_id)  # type: ignore

    async def update_bookmark(
        self, bookmark_id: int, owner_id: int, payload: BookmarkUpdate
    ) -> Optional[BookmarkRead]:
        """Write the fields set on the payload; None when the bookmark is not the owner's."""
        values = payload.model_dump(exclude_unset=True)
        if values:
            stmt = (
                update(Bookmark)
                .where(Bookmark.id == bookmark_id, Bookmark.owner_id == owner_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            result = await self.execute(stmt)
            if result.rowcount == 0:
                return None
        return await self.get_bookmark_by_id(bookmark_id, owner_id)

    async def delete_bookmark(self, bookmark_id: int, owner_id: int) -> bool:
        stmt = delete(Bookmark).where(Bookmark.id == bookmark_id, Bookmark.owner_id == owner_id)
        result = await self.execute(stmt)
        return result.rowcount > 0

    async def increase_opened_count(self, bookmark_id: int, owner_id: int) -> bool:
        """
        Atomically bump opened_times and stamp opened_last.

        The increment happens in the UPDATE itself, so concurrent opens are never lost.
        Returns False when no bookmark of this owner matched.
        """
        stmt = (
            update(Bookmark)
            .where(Bookmark.id == bookmark_id, Bookmark.owner_id == owner_id)
            .values(
                opened_times=Bookmark.opened_times + 1,
                opened_last=datetime.now(tz=timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.execute(stmt)
        return result.rowcount > 0

    # Tag links
    async def list_tag_ids(self, bookmark_id: int, owner_id: int) -> List[int]:
        stmt = select(BookmarkTag.tag_id).where(
            BookmarkTag.bookmark_id == bookmark_id, BookmarkTag.owner_id == owner_id
        )
        res = await self.scalars(stmt)
        return list(res)

    async def add_tag_to_bookmark(self, bookmark_id: int, owner_id: int, tag_id: int) -> bool:
        """
        Link a tag to a bookmark. Linking an already linked tag is a no-op.

        Returns True when a new link was created.
        """
        stmt = select(BookmarkTag.id).where(
            BookmarkTag.bookmark_id == bookmark_id,
            BookmarkTag.tag_id == tag_id,
            BookmarkTag.owner_id == owner_id,
        )
        if await self.scalar_one_or_none(stmt) is not None:
            return False
        await self.add(BookmarkTag(bookmark_id=bookmark_id, tag_id=tag_id, owner_id=owner_id))
        await self.flush()
        return True

    async def remove_tags_from_bookmark(
        self, bookmark_id: int, owner_id: int, tag_ids: Iterable[int]
    ) -> int:
        ids = list(tag_ids)
        if not ids:
            return 0
        stmt = delete(BookmarkTag).where(
            BookmarkTag.bookmark_id == bookmark_id,
            BookmarkTag.owner_id == owner_id,
            BookmarkTag.tag_id.in_(ids),
        )
        result = await self.execute(stmt)
        return result.rowcount
