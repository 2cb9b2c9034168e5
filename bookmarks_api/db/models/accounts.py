from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookmarks_api.db.base import Base, IntPkMixin, TimestampMixin


class User(IntPkMixin, TimestampMixin, Base):
    """Regular account; owns categories, tags, bookmarks and files."""
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)  # {"theme": ...}


class Admin(IntPkMixin, TimestampMixin, Base):
    """Administrator account, refreshed through the admin path prefix."""
    __tablename__ = "admins"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
