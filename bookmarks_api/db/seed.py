"""
Database seeding for local development.

Seeds:
- The admin account from ADMIN_EMAIL / ADMIN_PASSWORD (when both are set)
- A demo user (`demo` / `demo-password`) with the initial category

Every step looks up its row first, so running the seed twice changes nothing.

Usage:
  python -m bookmarks_api.db.run_migrations upgrade head
  python -m bookmarks_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.core.security import get_password_hash
from bookmarks_api.core.settings import get_app_settings
from bookmarks_api.db.session import session_scope
from bookmarks_api.repositories.categories import CategoryRepository
from bookmarks_api.repositories.users import UserRepository
from bookmarks_api.schemas.auth import RegisterRequest
from bookmarks_api.services.auth import create_initial_category, register_user

logger = logging.getLogger(__name__)

DEMO_USER = RegisterRequest(
    username="demo",
    email="demo@example.com",
    password="demo-password",
    name="Demo User",
)


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """
    Seed the database with the admin account and a demo user.

    Runs in one transaction.
    """
    async with session_scope() as session:
        await _seed_admin(session)
        await _seed_demo_user(session)


async def _seed_admin(session: AsyncSession) -> None:
    settings = get_app_settings()
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin seed")
        return
    repo = UserRepository(session)
    if await repo.get_admin_by_email(settings.ADMIN_EMAIL):
        return
    await repo.create_admin(email=settings.ADMIN_EMAIL, hashed_password=get_password_hash(settings.ADMIN_PASSWORD))
    logger.info("Seeded admin %s", settings.ADMIN_EMAIL)


async def _seed_demo_user(session: AsyncSession) -> None:
    user = await UserRepository(session).get_user_by_identity(DEMO_USER.username)
    if user is None:
        await register_user(session, DEMO_USER)
        return
    # Older demo users may predate initial categories.
    if await CategoryRepository(session).get_initial_category(user.id) is None:
        await create_initial_category(session, user.id)


if __name__ == "__main__":
    asyncio.run(seed_all())
