from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from bookmarks_api.db.models import Bookmark, File, Tag
from bookmarks_api.schemas.bookmarks import TagInput
from bookmarks_api.schemas.forms import BookmarkForm
from bookmarks_api.services.bookmarks import NO_IMAGES, BookmarkImages, BookmarkService, fetch_bookmark_images
from bookmarks_api.services.images import image_file_name


def _form(**overrides):
    values = dict(url="https://example.com/post", title="A Post", tags=[TagInput(name="news")])
    values.update(overrides)
    return BookmarkForm(**values)


async def _fake_fetch(client, url):
    return f"bytes of {url}".encode() if url else None


def _stored_blobs(tmp_path):
    return [p for p in (tmp_path / "files").rglob("*") if p.is_file()]


def test_image_file_name():
    assert image_file_name("https://cdn.example.com/img/cover.PNG?x=1", "My Post!") == "my-post.png"
    assert image_file_name("https://cdn.example.com/img/cover", "My Post") == "my-post.bin"


async def test_fetch_downloads_both_images():
    with patch("bookmarks_api.services.bookmarks.fetch_image", new=AsyncMock(side_effect=_fake_fetch)) as fetch:
        images = await fetch_bookmark_images("https://cdn.example.com/cover.jpg", None)

    assert images == BookmarkImages(b"bytes of https://cdn.example.com/cover.jpg", None)
    assert fetch.await_count == 2


async def test_fetch_without_urls_skips_the_client():
    with patch("bookmarks_api.services.bookmarks.fetch_image", new=AsyncMock()) as fetch:
        assert await fetch_bookmark_images(None, "") is NO_IMAGES
    fetch.assert_not_awaited()


async def test_failed_fetch_propagates():
    failing = AsyncMock(side_effect=httpx.ConnectError("unreachable"))
    with patch("bookmarks_api.services.bookmarks.fetch_image", new=failing):
        with pytest.raises(httpx.ConnectError):
            await fetch_bookmark_images("https://cdn.example.com/missing.jpg", None)


async def test_create_stores_images_and_links_tags(session, make_user, tmp_path):
    owner = (await make_user("alice"))["id"]
    form = _form(main_image_url="https://cdn.example.com/cover.jpg", icon_url="https://example.com/favicon.ico")
    images = BookmarkImages(b"cover bytes", b"icon bytes")

    async with session.begin():
        created = await BookmarkService(session).create_bookmark(form.to_create(owner), form.tags, images)

    assert created.main_image is not None and created.main_image.file_name == "a-post.jpg"
    assert created.icon is not None and created.icon.file_name == "a-post.ico"
    assert [t.name for t in created.tags] == ["news"]

    stored = await session.get(File, created.main_image_id)
    assert (Path(tmp_path / "files") / stored.storage_path).read_bytes() == b"cover bytes"


async def test_failure_after_storing_removes_images(session, make_user, tmp_path):
    owner = (await make_user("alice"))["id"]
    form = _form(main_image_url="https://cdn.example.com/cover.jpg", icon_url="https://example.com/favicon.ico")
    failing_tags = AsyncMock(side_effect=RuntimeError("tag insert failed"))

    with patch("bookmarks_api.services.bookmarks.prepare_tags", new=failing_tags):
        with pytest.raises(RuntimeError):
            async with session.begin():
                await BookmarkService(session).create_bookmark(
                    form.to_create(owner), form.tags, BookmarkImages(b"cover", b"icon")
                )

    assert failing_tags.await_count == 1
    assert await session.scalar(select(func.count(File.id))) == 0
    assert await session.scalar(select(func.count(Bookmark.id))) == 0
    assert await session.scalar(select(func.count(Tag.id))) == 0
    assert _stored_blobs(tmp_path) == []


async def test_failed_update_removes_only_new_images(session, make_user, tmp_path):
    owner = (await make_user("alice"))["id"]
    service = BookmarkService(session)
    first = _form(main_image_url="https://cdn.example.com/old.png")
    async with session.begin():
        created = await service.create_bookmark(first.to_create(owner), first.tags, BookmarkImages(b"old", None))
    kept = _stored_blobs(tmp_path)

    second = _form(main_image_url="https://cdn.example.com/new.png")
    failing_tags = AsyncMock(side_effect=RuntimeError("tag insert failed"))
    with patch("bookmarks_api.services.bookmarks.prepare_tags", new=failing_tags):
        with pytest.raises(RuntimeError):
            async with session.begin():
                await service.update_bookmark(
                    created.id, owner, second.to_update(), second.tags, BookmarkImages(b"new", None)
                )

    assert len(kept) == 1
    assert _stored_blobs(tmp_path) == kept
    assert kept[0].read_bytes() == b"old"


def test_missing_title_is_rejected_before_any_work():
    with pytest.raises(ValidationError):
        _form(title=None, main_image_url="https://cdn.example.com/a.png").to_create(1)


async def test_foreign_category_is_rejected(session, make_user):
    owner = (await make_user("alice"))["id"]
    form = _form(category_id=9999)
    with pytest.raises(ValueError):
        async with session.begin():
            await BookmarkService(session).create_bookmark(form.to_create(owner), form.tags)


async def test_update_replaces_tags_and_keeps_images(session, make_user):
    owner = (await make_user("alice"))["id"]
    service = BookmarkService(session)
    first = _form(main_image_url="https://cdn.example.com/a.png")
    async with session.begin():
        created = await service.create_bookmark(first.to_create(owner), first.tags, BookmarkImages(b"a", None))

    second = _form(title="Renamed", tags=[TagInput(name="python")])
    async with session.begin():
        updated = await service.update_bookmark(created.id, owner, second.to_update(), second.tags)

    assert updated.title == "Renamed"
    assert [t.name for t in updated.tags] == ["python"]
    assert updated.main_image_id == created.main_image_id


async def test_update_of_missing_bookmark_returns_none(session, make_user):
    owner = (await make_user("alice"))["id"]
    form = _form()
    async with session.begin():
        assert await BookmarkService(session).update_bookmark(12345, owner, form.to_update(), form.tags) is None
