"""Turn ORM rows into read models, including only the relations that were loaded."""
from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect

from bookmarks_api.db.models import Bookmark, Category, File, Tag, User
from bookmarks_api.schemas.auth import UserRead
from bookmarks_api.schemas.bookmarks import BookmarkRead, FileRead, TagRead
from bookmarks_api.schemas.categories import CategoryRead

T = TypeVar("T", bound=BaseModel)


def _row_to_dict(row: Any) -> Dict[str, Any]:
    state = inspect(row)
    data = {attr.key: getattr(row, attr.key) for attr in state.mapper.column_attrs}
    for rel in state.mapper.relationships:
        # relationships are lazy="raise"; touching an unloaded one would fail
        if rel.key not in state.unloaded:
            data[rel.key] = getattr(row, rel.key)
    return data


def _serialize(schema: Type[T], row: Any) -> T:
    return schema.model_validate(_row_to_dict(row), from_attributes=True)


def serialize_category(row: Category) -> CategoryRead:
    return _serialize(CategoryRead, row)


def serialize_bookmark(row: Bookmark) -> BookmarkRead:
    return _serialize(BookmarkRead, row)


def serialize_tag(row: Tag) -> TagRead:
    return _serialize(TagRead, row)


def serialize_file(row: File) -> FileRead:
    return _serialize(FileRead, row)


def serialize_user(row: User) -> UserRead:
    return _serialize(UserRead, row)
