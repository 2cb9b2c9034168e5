"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain (auth, categories, bookmarks, actions) and also
include common reusable models such as counts and the error envelope.
"""

from .common import MessageResponse  # noqa: F401
from .actions import ActionResult  # noqa: F401
