import pytest

from bookmarks_api.repositories.base import page_offset
from bookmarks_api.repositories.categories import CategoryRelations, CategoryRepository
from bookmarks_api.schemas.categories import CategoryCreate, CategoryUpdate


async def _add(repo, owner_id, name, parent_id=None):
    return await repo.create_category(
        CategoryCreate(name=name, slug=name.lower(), owner_id=owner_id, parent_id=parent_id)
    )


@pytest.fixture()
async def owners(make_user):
    return (await make_user("alice"))["id"], (await make_user("bob"))["id"]


async def test_get_category_is_owner_scoped(session, owners):
    alice, bob = owners
    repo = CategoryRepository(session)
    category = await _add(repo, bob, "Work")
    await session.commit()

    assert await repo.get_category_by_id(category.id, alice) is None
    found = await repo.get_category_by_id(category.id, bob)
    assert found is not None and found.name == "Work"


async def test_update_and_delete_of_foreign_category_affect_nothing(session, owners):
    alice, bob = owners
    repo = CategoryRepository(session)
    category = await _add(repo, bob, "Work")
    await session.commit()

    assert await repo.update_category(category.id, alice, CategoryUpdate(name="Hijacked")) is None
    assert await repo.delete_category(category.id, alice) is False
    await session.commit()

    still = await repo.get_category_by_id(category.id, bob)
    assert still is not None and still.name == "Work"


async def test_relations_are_expanded_on_request(session, owners):
    alice, _ = owners
    repo = CategoryRepository(session)
    parent = await _add(repo, alice, "Parent")
    child = await _add(repo, alice, "Child", parent_id=parent.id)
    await session.commit()

    full = await repo.get_category_by_id(child.id, alice)
    assert full.parent is not None and full.parent.id == parent.id
    assert full.owner is not None and full.owner.username == "alice"

    session.expunge_all()

    bare = await repo.get_category_by_id(child.id, alice, relations=())
    assert bare.parent is None and bare.owner is None
    assert bare.parent_id == parent.id

    session.expunge_all()

    only_parent = await repo.get_category_by_id(child.id, alice, relations=[CategoryRelations.PARENT])
    assert only_parent.parent is not None and only_parent.owner is None


async def test_listing_pages_and_sorts(session, owners):
    alice, bob = owners
    repo = CategoryRepository(session)
    for i in range(12):
        await _add(repo, alice, f"C{i:02d}")
    await _add(repo, bob, "Other")
    await session.commit()

    # 12 created + the initial category
    assert await repo.fetch_category_count_by_user_id(alice) == 13
    everything = await repo.get_categories_by_user_id(alice)
    assert len(everything) == 13
    assert all(c.owner_id == alice for c in everything)

    second_page = await repo.get_categories_by_user_id(
        alice, order_by="name", order_direction="asc", limit=10, page=2, relations=()
    )
    assert [c.name for c in second_page] == ["C10", "C11", "Uncategorized"]

    descending = await repo.get_categories_by_user_id(alice, order_by="name", order_direction="sideways", limit=1)
    assert descending[0].name == "Uncategorized"


def test_page_offset():
    assert page_offset(2, 10) == 10
    assert page_offset(1, 10) == 0
    assert page_offset(None, 10) is None
    assert page_offset(3, None) is None


async def test_registration_creates_initial_category(session, owners):
    alice, _ = owners
    initial = await CategoryRepository(session).get_initial_category(alice)
    assert initial is not None
    assert initial.initial is True
    assert initial.slug == "uncategorized"
