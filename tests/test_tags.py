from sqlalchemy import func, select

from bookmarks_api.db.models import Tag
from bookmarks_api.repositories.tags import TagRepository
from bookmarks_api.schemas.bookmarks import TagInput
from bookmarks_api.services.tags import prepare_tags


async def test_same_name_yields_same_tag(session, make_user):
    owner = (await make_user("alice"))["id"]

    first = await prepare_tags(session, [TagInput(name="python")], owner)
    second = await prepare_tags(session, [TagInput(name="python")], owner)
    await session.commit()

    assert first == second
    count = await session.scalar(select(func.count(Tag.id)).where(Tag.owner_id == owner, Tag.name == "python"))
    assert count == 1


async def test_existing_references_new_names_and_duplicates(session, make_user):
    owner = (await make_user("alice"))["id"]
    existing = await TagRepository(session).create_tag("rust", owner)

    ids = await prepare_tags(
        session,
        [
            TagInput(id=existing.id, name="rust"),
            TagInput(name="go"),
            TagInput(name="  "),
            TagInput(name="go"),
            TagInput(name="rust"),
        ],
        owner,
    )

    names = {t.id: t.name for t in await TagRepository(session).list_tags_by_user_id(owner)}
    assert ids[0] == existing.id
    assert [names[i] for i in ids] == ["rust", "go"]


async def test_tags_are_per_owner(session, make_user):
    alice = (await make_user("alice"))["id"]
    bob = (await make_user("bob"))["id"]
    bobs = await TagRepository(session).create_tag("shared", bob)

    # A reference to another owner's tag falls back to the name, scoped to the caller.
    ids = await prepare_tags(session, [TagInput(id=bobs.id, name="shared")], alice)
    await session.commit()

    assert ids != [bobs.id]
    mine = await TagRepository(session).get_tag_by_id(ids[0], alice)
    assert mine is not None and mine.name == "shared"
