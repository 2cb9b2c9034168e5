from __future__ import annotations

import logging
from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.repositories.tags import TagRepository
from bookmarks_api.schemas.bookmarks import TagInput

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
async def prepare_tags(session: AsyncSession, tags: Sequence[TagInput], owner_id: int) -> List[int]:
    """
    Resolve tag descriptors to tag ids, creating missing tags for the owner.

    Each descriptor is handled in order:
      - a reference to one of the owner's tags is used as is;
      - anything else is resolved by (name, owner_id), inserting a new tag
        when no such tag exists yet.

    Blank names are skipped and the returned ids keep input order without
    duplicates. Submitting the same name again yields the same id, never a
    second row.
    """
    repo = TagRepository(session)
    resolved: List[int] = []

    for tag in tags:
        tag_id = None
        if tag.id is not None:
            existing = await repo.get_tag_by_id(tag.id, owner_id)
            if existing is not None:
                tag_id = existing.id

        if tag_id is None:
            name = (tag.name or "").strip()
            if not name:
                continue
            existing = await repo.get_tag_by_name(name, owner_id)
            if existing is None:
                existing = await repo.create_tag(name, owner_id)
                logger.debug("Created tag %r for owner %s", name, owner_id)
            tag_id = existing.id

        if tag_id not in resolved:
            resolved.append(tag_id)

    return resolved
