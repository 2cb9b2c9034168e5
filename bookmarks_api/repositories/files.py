from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from bookmarks_api.db.models import File
from .base import BaseRepository


class FileRepository(BaseRepository):
    """Repository for stored file records."""

    async def get_file_by_id(self, file_id: int, owner_id: int) -> Optional[File]:
        stmt = select(File).where(File.id == file_id, File.owner_id == owner_id)
        return await self.scalar_one_or_none(stmt)

    async def create_file(self, *, owner_id: int, file_name: str, storage_path: str, size: int) -> File:
        row = File(owner_id=owner_id, file_name=file_name, storage_path=storage_path, size=size)
        await self.add(row)
        await self.flush()
        await self.session.refresh(row)
        return row
