from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import httpx

from bookmarks_api.core.slug import create_slug

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "bin"


def image_file_name(url: str, title: Optional[str]) -> str:
    """Slug of the title plus the extension of the URL path, e.g. `my-article.png`."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lstrip(".")
    extension = create_slug(suffix) or DEFAULT_EXTENSION
    return f"{create_slug(title) or 'image'}.{extension}"


# PUBLIC_INTERFACE
async def fetch_image(client: httpx.AsyncClient, url: Optional[str]) -> Optional[bytes]:
    """
    Download an image; None when no URL was given.

    Raises:
        httpx.HTTPError: the request failed or answered with an error status.
    """
    if not url:
        return None
    response = await client.get(url, follow_redirects=True)
    response.raise_for_status()
    logger.debug("Fetched %s (%d bytes)", url, len(response.content))
    return response.content
