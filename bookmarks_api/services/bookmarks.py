from __future__ import annotations

import asyncio
import logging
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import httpx

from bookmarks_api.core.settings import get_app_settings
from bookmarks_api.repositories.bookmarks import BookmarkRepository
from bookmarks_api.repositories.categories import CategoryRepository
from bookmarks_api.schemas.bookmarks import BookmarkCreate, BookmarkRead, BookmarkUpdate, TagInput
from .base import BaseService
from .images import fetch_image, image_file_name
from .storage import Storage
from .tags import prepare_tags

logger = logging.getLogger(__name__)


class BookmarkImages(NamedTuple):
    """Downloaded image bytes; None where no URL was given."""
    main_image: Optional[bytes] = None
    icon: Optional[bytes] = None


NO_IMAGES = BookmarkImages()


# PUBLIC_INTERFACE
async def fetch_bookmark_images(main_image_url: Optional[str], icon_url: Optional[str]) -> BookmarkImages:
    """
    Download the main image and the icon concurrently.

    Runs before the bookmark transaction is opened so no database connection
    is held while waiting on image hosts.

    Raises:
        httpx.HTTPError: an image could not be fetched.
    """
    if not main_image_url and not icon_url:
        return NO_IMAGES
    timeout = get_app_settings().IMAGE_FETCH_TIMEOUT
    async with httpx.AsyncClient(timeout=timeout) as client:
        main_image, icon = await asyncio.gather(
            fetch_image(client, main_image_url),
            fetch_image(client, icon_url),
        )
    return BookmarkImages(main_image, icon)


class BookmarkService(BaseService):
    """
    Store, insert and link bookmarks together with their images and tags.

    The service never commits: callers wrap each call in one transaction so a
    failing step (image store, tag insert, link) leaves nothing behind, on disk
    included.
    """

    def __init__(self, session, storage: Optional[Storage] = None) -> None:
        super().__init__(session)
        self.bookmarks = BookmarkRepository(session)
        self.categories = CategoryRepository(session)
        self.storage = storage or Storage(session)

    async def _store_image(
        self, data: Optional[bytes], url: Optional[str], title: Optional[str], owner_id: int
    ) -> Optional[int]:
        if data is None or not url:
            return None
        files = await self.storage.store_file(data, owner_id=owner_id, file_name=image_file_name(url, title))
        return files[0].id

    async def _store_images(
        self, payload: Union[BookmarkCreate, BookmarkUpdate], images: BookmarkImages, owner_id: int
    ) -> Tuple[Optional[int], Optional[int]]:
        # Stored one after the other: the session is not safe for concurrent use.
        main_image_id = await self._store_image(images.main_image, payload.main_image_url, payload.title, owner_id)
        icon_id = await self._store_image(images.icon, payload.icon_url, payload.title, owner_id)
        return main_image_id, icon_id

    async def _check_category(self, category_id: Optional[int], owner_id: int) -> None:
        if category_id is not None and not await self.categories.is_owned(category_id, owner_id):
            raise ValueError("Category not found")

    # PUBLIC_INTERFACE
    async def create_bookmark(
        self, payload: BookmarkCreate, tags: Sequence[TagInput], images: BookmarkImages = NO_IMAGES
    ) -> BookmarkRead:
        """
        Insert a bookmark, store its already fetched images and link its tags.

        Raises:
            ValueError: the category does not belong to the owner.
        """
        owner_id = payload.owner_id
        await self._check_category(payload.category_id, owner_id)
        main_image_id, icon_id = await self._store_images(payload, images, owner_id)
        tag_ids = await prepare_tags(self.session, tags, owner_id)

        created = await self.bookmarks.create_bookmark(
            payload.model_copy(update={"main_image_id": main_image_id, "icon_id": icon_id})
        )
        for tag_id in tag_ids:
            await self.bookmarks.add_tag_to_bookmark(created.id, owner_id, tag_id)

        logger.info("Created bookmark %s with %d tag(s)", created.id, len(tag_ids))
        return await self.bookmarks.get_bookmark_by_id(created.id, owner_id)  # type: ignore

    # PUBLIC_INTERFACE
    async def update_bookmark(
        self,
        bookmark_id: int,
        owner_id: int,
        payload: BookmarkUpdate,
        tags: Sequence[TagInput],
        images: BookmarkImages = NO_IMAGES,
    ) -> Optional[BookmarkRead]:
        """
        Update a bookmark and replace its tag set.

        Image ids are only overwritten when a new image was stored.

        Returns:
            The updated bookmark, or None when the owner has no such bookmark.
        """
        if await self.bookmarks.get_bookmark_by_id(bookmark_id, owner_id, relations=()) is None:
            return None
        await self._check_category(payload.category_id, owner_id)
        main_image_id, icon_id = await self._store_images(payload, images, owner_id)
        tag_ids = await prepare_tags(self.session, tags, owner_id)

        stored = {}
        if main_image_id is not None:
            stored["main_image_id"] = main_image_id
        if icon_id is not None:
            stored["icon_id"] = icon_id
        updated = await self.bookmarks.update_bookmark(bookmark_id, owner_id, payload.model_copy(update=stored))
        if updated is None:
            return None

        current = await self.bookmarks.list_tag_ids(bookmark_id, owner_id)
        await self.bookmarks.remove_tags_from_bookmark(
            bookmark_id, owner_id, [tag_id for tag_id in current if tag_id not in tag_ids]
        )
        for tag_id in tag_ids:
            await self.bookmarks.add_tag_to_bookmark(bookmark_id, owner_id, tag_id)

        logger.info("Updated bookmark %s", bookmark_id)
        return await self.bookmarks.get_bookmark_by_id(bookmark_id, owner_id)
