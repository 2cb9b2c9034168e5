import pytest
from sqlalchemy import func, select, update

from bookmarks_api.db.models import Bookmark, BookmarkTag
from bookmarks_api.repositories.bookmarks import BookmarkRepository
from bookmarks_api.repositories.tags import TagRepository
from bookmarks_api.schemas.bookmarks import BookmarkCreate, BookmarkUpdate


@pytest.fixture()
async def owners(make_user):
    return (await make_user("alice"))["id"], (await make_user("bob"))["id"]


async def _bookmark(repo, owner_id, title="Example", **extra):
    return await repo.create_bookmark(
        BookmarkCreate(owner_id=owner_id, url=f"https://example.com/{title.lower()}", title=title, **extra)
    )


async def test_bookmarks_are_invisible_to_other_owners(session, owners):
    alice, bob = owners
    repo = BookmarkRepository(session)
    created = await _bookmark(repo, bob)
    await session.commit()

    assert await repo.get_bookmark_by_id(created.id, alice) is None
    assert await repo.update_bookmark(created.id, alice, BookmarkUpdate(title="Mine now")) is None
    assert await repo.delete_bookmark(created.id, alice) is False
    assert await repo.increase_opened_count(created.id, alice) is False
    assert await repo.get_bookmarks_by_user_id(alice) == []
    await session.commit()

    kept = await repo.get_bookmark_by_id(created.id, bob)
    assert kept.title == "Example"
    assert kept.opened_times == 0


async def test_increase_opened_count(session, owners):
    alice, _ = owners
    repo = BookmarkRepository(session)
    created = await _bookmark(repo, alice)
    await session.execute(update(Bookmark).where(Bookmark.id == created.id).values(opened_times=3))
    await session.commit()

    assert await repo.increase_opened_count(created.id, alice) is True
    await session.commit()

    bumped = await repo.get_bookmark_by_id(created.id, alice, relations=())
    assert bumped.opened_times == 4
    assert bumped.opened_last is not None
    assert await repo.increase_opened_count(created.id + 1000, alice) is False


async def test_filters_and_count(session, owners):
    alice, bob = owners
    repo = BookmarkRepository(session)
    await _bookmark(repo, alice, "Flagged", importance=2)
    await _bookmark(repo, alice, "Plain")
    await _bookmark(repo, bob, "Elsewhere")
    await session.commit()

    first = (await repo.get_bookmarks_by_user_id(alice, order_by="title", order_direction="asc"))[0]
    await repo.update_bookmark(first.id, alice, BookmarkUpdate(flagged=first.created_at))
    await session.commit()

    assert await repo.fetch_bookmark_count_by_user_id(alice) == 2
    flagged = await repo.get_bookmarks_by_user_id(alice, flagged=True)
    assert [b.title for b in flagged] == ["Flagged"]
    unflagged = await repo.get_bookmarks_by_user_id(alice, flagged=False)
    assert [b.title for b in unflagged] == ["Plain"]
    unread = await repo.get_bookmarks_by_user_id(alice, read=False)
    assert len(unread) == 2


async def test_tag_links_are_idempotent(session, owners):
    alice, _ = owners
    repo = BookmarkRepository(session)
    created = await _bookmark(repo, alice)
    tag = await TagRepository(session).create_tag("python", alice)

    assert await repo.add_tag_to_bookmark(created.id, alice, tag.id) is True
    assert await repo.add_tag_to_bookmark(created.id, alice, tag.id) is False
    await session.commit()

    links = await session.scalar(select(func.count(BookmarkTag.id)).where(BookmarkTag.bookmark_id == created.id))
    assert links == 1

    loaded = await repo.get_bookmark_by_id(created.id, alice)
    assert [t.name for t in loaded.tags] == ["python"]

    assert await repo.remove_tags_from_bookmark(created.id, alice, [tag.id]) == 1
    assert await repo.list_tag_ids(created.id, alice) == []
