from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import or_, select, update

from bookmarks_api.db.models import Admin, User
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for user and admin accounts."""

    # Users
    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_identity(self, identity: str) -> Optional[User]:
        """Look a user up by username or email."""
        stmt = select(User).where(or_(User.username == identity, User.email == identity))
        return await self.scalar_one_or_none(stmt)

    async def create_user(
        self,
        *,
        username: str,
        email: str,
        hashed_password: str,
        name: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> User:
        user = User(
            username=username,
            email=email,
            name=name,
            hashed_password=hashed_password,
            settings=settings or {},
        )
        await self.add(user)
        await self.flush()
        return (await self.get_user_by_id(user.id))  # type: ignore

    async def update_user_settings(self, user_id: int, values: Dict[str, Any]) -> Optional[User]:
        """Merge values into the user's settings document."""
        user = await self.get_user_by_id(user_id)
        if user is None:
            return None
        merged = {**(user.settings or {}), **values}
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(settings=merged)
            .execution_options(synchronize_session=False)
        )
        await self.execute(stmt)
        return await self.get_user_by_id(user_id)

    # Admins
    async def get_admin_by_id(self, admin_id: int) -> Optional[Admin]:
        stmt = select(Admin).where(Admin.id == admin_id)
        return await self.scalar_one_or_none(stmt)

    async def get_admin_by_email(self, email: str) -> Optional[Admin]:
        stmt = select(Admin).where(Admin.email == email)
        return await self.scalar_one_or_none(stmt)

    async def create_admin(self, *, email: str, hashed_password: str) -> Admin:
        admin = Admin(email=email, hashed_password=hashed_password)
        await self.add(admin)
        await self.flush()
        await self.session.refresh(admin)
        return admin
