from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import Executable, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Note:
      Repositories never commit. The caller owns the transaction
      (`async with session.begin(): ...`) so several repository calls can
      succeed or fail together. Every query on user data must carry an
      explicit owner_id filter.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def flush(self) -> None:
        """Flush pending changes so generated ids are available."""
        await self.session.flush()

    async def add_all(self, entities: Iterable[Any]) -> None:
        """Add multiple entities to session."""
        self.session.add_all(list(entities))

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)


def relation_options(model: Any, relations: Sequence[Enum]) -> list:
    """Map relation names to eager-load options (the ORM equivalent of a `with` clause)."""
    return [selectinload(getattr(model, rel.value)) for rel in relations]


def page_offset(page: Optional[int], limit: Optional[int]) -> Optional[int]:
    """Offset for a 1-based page; None unless both page and limit are given."""
    if page and limit:
        return (page - 1) * limit
    return None


def order_clause(column: Any, direction: Optional[str]):
    """Ascending only when asked for explicitly; any other direction sorts descending."""
    return asc(column) if direction == "asc" else desc(column)
