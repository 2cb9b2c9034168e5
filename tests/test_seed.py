from sqlalchemy import func, select

from bookmarks_api.core.settings import get_app_settings
from bookmarks_api.db.models import Admin, Category, User
from bookmarks_api.db.seed import seed_all


async def test_seed_is_idempotent(session, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "root@example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "admin-password")
    get_app_settings.cache_clear()

    await seed_all()
    await seed_all()

    assert await session.scalar(select(func.count(Admin.id))) == 1
    assert await session.scalar(select(func.count(User.id)).where(User.username == "demo")) == 1
    initial = await session.scalar(select(func.count(Category.id)).where(Category.initial.is_(True)))
    assert initial == 1
