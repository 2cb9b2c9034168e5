from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookmarks_api.db.base import Base, IntPkMixin, OwnerMixin, TimestampMixin
from bookmarks_api.db.models.accounts import User


class Category(IntPkMixin, OwnerMixin, TimestampMixin, Base):
    """User category; categories form a tree through parent_id."""
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    archived: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    public: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    initial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    owner: Mapped[User] = relationship(User, lazy="raise")
    parent: Mapped[Optional["Category"]] = relationship(
        "Category", remote_side="Category.id", lazy="raise"
    )
