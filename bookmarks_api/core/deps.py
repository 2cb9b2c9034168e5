from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, Request, status

from bookmarks_api.schemas.actions import ActionResult
from bookmarks_api.services.auth import USERS_COLLECTION, AuthClient

logger = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized"


# PUBLIC_INTERFACE
def get_owner_id(request: Request) -> Optional[int]:
    """
    Return the id of the user bound to this request's session, if any.

    Admin sessions and anonymous requests yield None.
    """
    user = getattr(request.state, "user", None)
    if not isinstance(user, dict) or user.get("collection") != USERS_COLLECTION:
        return None
    try:
        return int(user["id"])
    except (KeyError, TypeError, ValueError):
        return None


# PUBLIC_INTERFACE
def require_owner_id(owner_id: Optional[int] = Depends(get_owner_id)) -> int:
    """
    Same as get_owner_id for read endpoints that must not run anonymously.

    Raises:
        HTTPException: 401 Unauthorized without a user session.
    """
    if owner_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return owner_id


# PUBLIC_INTERFACE
def get_auth_client(request: Request) -> AuthClient:
    """The request-scoped auth client installed by the auth middleware."""
    client = getattr(request.state, "auth", None)
    if client is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Auth middleware not installed")
    return client


# PUBLIC_INTERFACE
def authorized_action(error: Optional[str] = UNAUTHORIZED):
    """
    Guard a form action on a session-bound user.

    The wrapped endpoint must take `owner_id` via `Depends(get_owner_id)`. When it
    is None the endpoint is not called and `{success: false, error}` is returned
    (just `{success: false}` when error is None), with status 200.
    """

    def decorator(func: Callable[..., Awaitable[Any]]):
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any):
            if kwargs.get("owner_id") is None:
                logger.info("Rejected anonymous call to %s", func.__name__)
                return ActionResult(success=False, error=error)
            return await func(*args, **kwargs)

        return wrapper

    return decorator
