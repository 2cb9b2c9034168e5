from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from bookmarks_api.db.models import Tag
from .base import BaseRepository


class TagRepository(BaseRepository):
    """Repository for tags. Names are unique per owner."""

    async def get_tag_by_id(self, tag_id: int, owner_id: int) -> Optional[Tag]:
        stmt = select(Tag).where(Tag.id == tag_id, Tag.owner_id == owner_id)
        return await self.scalar_one_or_none(stmt)

    async def get_tag_by_name(self, name: str, owner_id: int) -> Optional[Tag]:
        stmt = select(Tag).where(Tag.name == name, Tag.owner_id == owner_id)
        return await self.scalar_one_or_none(stmt)

    async def create_tag(self, name: str, owner_id: int) -> Tag:
        row = Tag(name=name, owner_id=owner_id)
        await self.add(row)
        await self.flush()
        await self.session.refresh(row)
        return row

    async def list_tags_by_user_id(self, owner_id: int) -> List[Tag]:
        stmt = select(Tag).where(Tag.owner_id == owner_id).order_by(Tag.name)
        res = await self.scalars(stmt)
        return list(res)
