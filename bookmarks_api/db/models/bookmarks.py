from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookmarks_api.db.base import Base, IntPkMixin, OwnerMixin, TimestampMixin
from bookmarks_api.db.models.accounts import User
from bookmarks_api.db.models.categories import Category
from bookmarks_api.db.models.files import File


class Tag(IntPkMixin, OwnerMixin, TimestampMixin, Base):
    """Free-form label; names are unique per owner."""
    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_tags_owner_name"),
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    owner: Mapped[User] = relationship(User, lazy="raise")


class Bookmark(IntPkMixin, OwnerMixin, TimestampMixin, Base):
    """Saved URL with extracted metadata and reading state."""
    __tablename__ = "bookmarks"

    url: Mapped[str] = mapped_column(Text, nullable=False)
    domain: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_html: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_published_date: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    main_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    main_image_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("files.id", ondelete="SET NULL"), nullable=True
    )
    icon_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("files.id", ondelete="SET NULL"), nullable=True
    )
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    importance: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    flagged: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    read: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    opened_times: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    opened_last: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )

    owner: Mapped[User] = relationship(User, lazy="raise")
    category: Mapped[Optional[Category]] = relationship(Category, lazy="raise")
    main_image: Mapped[Optional[File]] = relationship(File, foreign_keys=[main_image_id], lazy="raise")
    icon: Mapped[Optional[File]] = relationship(File, foreign_keys=[icon_id], lazy="raise")
    tags: Mapped[list[Tag]] = relationship(
        Tag,
        secondary="bookmark_tags",
        primaryjoin="Bookmark.id==BookmarkTag.bookmark_id",
        secondaryjoin="Tag.id==BookmarkTag.tag_id",
        order_by="Tag.name",
        viewonly=True,
        lazy="raise",
    )


class BookmarkTag(IntPkMixin, OwnerMixin, Base):
    """Association of bookmarks to tags."""
    __tablename__ = "bookmark_tags"
    __table_args__ = (
        UniqueConstraint("bookmark_id", "tag_id", name="uq_bookmark_tags_bookmark_tag"),
    )

    bookmark_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookmarks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True
    )
