from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional, Sequence

from sqlalchemy import delete, func, select, update

from bookmarks_api.db.models import Category
from bookmarks_api.schemas.categories import CategoryCreate, CategoryRead, CategoryUpdate
from .base import BaseRepository, order_clause, page_offset, relation_options
from .serialize import serialize_category


class CategoryRelations(str, Enum):
    OWNER = "owner"
    PARENT = "parent"


ALL_CATEGORY_RELATIONS: List[CategoryRelations] = list(CategoryRelations)

CategoryOrderKey = Literal["created", "name", "slug"]

_ORDER_KEYS = {
    "created": Category.created_at,
    "name": Category.name,
    "slug": Category.slug,
}


class CategoryRepository(BaseRepository):
    """Repository for user categories. Every statement is scoped by owner_id."""

    async def get_category_by_id(
        self,
        category_id: int,
        owner_id: int,
        relations: Sequence[CategoryRelations] = ALL_CATEGORY_RELATIONS,
    ) -> Optional[CategoryRead]:
        stmt = (
            select(Category)
            .where(Category.id == category_id, Category.owner_id == owner_id)
            .options(*relation_options(Category, relations))
            .execution_options(populate_existing=True)
        )
        row = await self.scalar_one_or_none(stmt)
        return serialize_category(row) if row else None

    async def get_categories_by_user_id(
        self,
        user_id: int,
        *,
        order_by: Optional[CategoryOrderKey] = None,
        order_direction: Optional[Literal["asc", "desc"]] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
        relations: Sequence[CategoryRelations] = ALL_CATEGORY_RELATIONS,
    ) -> List[CategoryRead]:
        stmt = (
            select(Category)
            .where(Category.owner_id == user_id)
            .options(*relation_options(Category, relations))
            .execution_options(populate_existing=True)
        )
        if order_by:
            stmt = stmt.order_by(order_clause(_ORDER_KEYS[order_by], order_direction))
        if limit:
            stmt = stmt.limit(limit)
        offset = page_offset(page, limit)
        if offset:
            stmt = stmt.offset(offset)
        res = await self.scalars(stmt)
        return [serialize_category(row) for row in res]

    async def create_category(self, payload: CategoryCreate) -> CategoryRead:
        row = Category(**payload.model_dump())
        await self.add(row)
        await self.flush()
        return await self.get_category_by_id(row.id, row.owner_id, relations=())  # type: ignore

    async def update_category(
        self, category_id: int, owner_id: int, payload: CategoryUpdate
    ) -> Optional[CategoryRead]:
        values = payload.model_dump(exclude_unset=True)
        if values:
            stmt = (
                update(Category)
                .where(Category.id == category_id, Category.owner_id == owner_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            result = await self.execute(stmt)
            if result.rowcount == 0:
                return None
        return await self.get_category_by_id(category_id, owner_id, relations=())

    async def delete_category(self, category_id: int, owner_id: int) -> bool:
        stmt = delete(Category).where(Category.id == category_id, Category.owner_id == owner_id)
        result = await self.execute(stmt)
        return result.rowcount > 0

    async def fetch_category_count_by_user_id(self, user_id: int) -> int:
        stmt = select(func.count(Category.id)).where(Category.owner_id == user_id)
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def get_initial_category(self, owner_id: int) -> Optional[CategoryRead]:
        stmt = (
            select(Category)
            .where(Category.owner_id == owner_id, Category.initial.is_(True))
            .order_by(Category.id)
            .limit(1)
        )
        row = await self.scalar_one_or_none(stmt)
        return serialize_category(row) if row else None

    async def is_owned(self, category_id: int, owner_id: int) -> bool:
        stmt = select(Category.id).where(Category.id == category_id, Category.owner_id == owner_id)
        return (await self.scalar_one_or_none(stmt)) is not None
