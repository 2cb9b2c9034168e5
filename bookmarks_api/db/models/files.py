from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookmarks_api.db.base import Base, IntPkMixin, OwnerMixin, TimestampMixin


class File(IntPkMixin, OwnerMixin, TimestampMixin, Base):
    """Stored blob (bookmark main image or icon); bytes live on disk under storage_path."""
    __tablename__ = "files"

    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
