from __future__ import annotations

import copy
import logging

from fastapi import Request

from bookmarks_api.core.logging import user_id_var
from bookmarks_api.core.settings import get_app_settings
from bookmarks_api.services.auth import AuthClient, AuthStore

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
async def auth_refresh_middleware(request: Request, call_next):
    """
    Load the session cookie into a fresh AuthStore, refresh it and re-export it.

    A valid token is refreshed against the admin or the user account depending on
    the path; any failure, an invalid token or a missing cookie leaves an empty
    store. The handler sees the client as `request.state.auth` and a copy of the
    account record as `request.state.user` (None when signed out). The store is
    written back as the session cookie on every response.
    """
    settings = get_app_settings()
    store = AuthStore(settings.AUTH_COOKIE_NAME)
    store.load_from_cookie(request.headers.get("cookie", ""))
    client = AuthClient(store)

    if store.is_valid:
        try:
            if request.url.path.startswith(settings.ADMIN_PATH_PREFIX):
                refreshed = await client.refresh_admin()
                logger.info("Admin logged: %s", refreshed["admin"]["email"])
            else:
                refreshed = await client.refresh_user()
                logger.info("User logged: %s", refreshed["record"]["username"])
        except Exception as exc:
            logger.warning("Session refresh failed, signing out: %s", exc)
            store.clear()
    else:
        store.clear()

    request.state.auth = client
    request.state.user = copy.deepcopy(store.model) if store.model else None

    user = request.state.user
    token_user = user_id_var.set(str(user["id"]) if user and "id" in user else None)
    try:
        response = await call_next(request)
    finally:
        user_id_var.reset(token_user)

    store.export_to_cookie(response, http_only=False, secure=settings.AUTH_COOKIE_SECURE)
    return response
