"""
ORM models for accounts, categories, tags, bookmarks and stored files.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .accounts import (  # noqa: F401
    User,
    Admin,
)
from .categories import (  # noqa: F401
    Category,
)
from .files import (  # noqa: F401
    File,
)
from .bookmarks import (  # noqa: F401
    Tag,
    Bookmark,
    BookmarkTag,
)
