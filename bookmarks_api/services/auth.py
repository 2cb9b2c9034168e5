"""
Session handling: a per-request auth store backed by the session cookie, and
the client that refreshes or establishes sessions for user and admin accounts.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote, unquote

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import cookie_parser
from starlette.responses import Response

from bookmarks_api.core.security import (
    AccountType,
    create_session_token,
    decode_token,
    get_password_hash,
    is_token_valid,
    verify_password,
)
from bookmarks_api.core.settings import get_app_settings
from bookmarks_api.core.slug import create_slug
from bookmarks_api.db.models import Admin, User
from bookmarks_api.db.session import session_scope
from bookmarks_api.repositories.categories import CategoryRepository
from bookmarks_api.repositories.users import UserRepository
from bookmarks_api.schemas.auth import AdminRead, RegisterRequest, UserRead
from bookmarks_api.schemas.categories import CategoryCreate

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
ADMINS_COLLECTION = "admins"


class AuthRefreshError(Exception):
    """The session could not be refreshed or established."""


def user_record(user: User) -> Dict[str, Any]:
    record = UserRead.model_validate(user).model_dump(mode="json")
    record["collection"] = USERS_COLLECTION
    return record


def admin_record(admin: Admin) -> Dict[str, Any]:
    record = AdminRead.model_validate(admin).model_dump(mode="json")
    record["collection"] = ADMINS_COLLECTION
    return record


class AuthStore:
    """
    Token and account record for one request.

    The store is loaded from the session cookie at the start of a request and
    exported back into it at the end. A new store is built for every request.
    """

    def __init__(self, cookie_name: str) -> None:
        self.cookie_name = cookie_name
        self.token: str = ""
        self.model: Optional[Dict[str, Any]] = None

    @property
    def is_valid(self) -> bool:
        return is_token_valid(self.token)

    def save(self, token: str, model: Optional[Dict[str, Any]]) -> None:
        self.token = token or ""
        self.model = model

    def clear(self) -> None:
        self.token = ""
        self.model = None

    def load_from_cookie(self, cookie_header: str) -> None:
        """Populate the store from a raw `cookie` header; a missing or garbled cookie clears it."""
        raw = cookie_parser(cookie_header or "").get(self.cookie_name)
        if not raw:
            self.clear()
            return
        try:
            data = json.loads(unquote(raw))
        except ValueError:
            logger.debug("Ignoring malformed %s cookie", self.cookie_name)
            self.clear()
            return
        if not isinstance(data, dict):
            self.clear()
            return
        model = data.get("model")
        self.save(str(data.get("token") or ""), model if isinstance(model, dict) else None)

    def export_to_cookie(self, response: Response, *, http_only: bool = False, secure: bool = False) -> None:
        """Write the store into the response's set-cookie header; an empty store expires the cookie."""
        if not self.token:
            response.set_cookie(
                self.cookie_name, "", max_age=0, path="/", httponly=http_only, secure=secure, samesite="strict"
            )
            return

        value = quote(json.dumps({"token": self.token, "model": self.model}, separators=(",", ":")))
        expires: Optional[datetime] = None
        try:
            exp = jwt.get_unverified_claims(self.token).get("exp")
            if exp:
                expires = datetime.fromtimestamp(int(exp), tz=timezone.utc)
        except JWTError:
            expires = None
        response.set_cookie(
            self.cookie_name,
            value,
            expires=expires,
            path="/",
            httponly=http_only,
            secure=secure,
            samesite="strict",
        )


class AuthClient:
    """Refreshes, establishes and ends sessions held in an AuthStore."""

    def __init__(self, store: AuthStore) -> None:
        self.store = store

    def _claims(self, account_type: AccountType) -> Dict[str, Any]:
        try:
            claims = decode_token(self.store.token)
        except JWTError as exc:
            raise AuthRefreshError("Invalid or expired session") from exc
        if claims.get("type") != account_type or not claims.get("sub"):
            raise AuthRefreshError(f"Session is not a {account_type} session")
        return claims

    # PUBLIC_INTERFACE
    async def refresh_user(self) -> Dict[str, Any]:
        """
        Re-validate a user session and issue a fresh token.

        Returns:
            {"token": str, "record": {...}} with the current user record.
        Raises:
            AuthRefreshError: invalid/expired token or the user no longer exists.
        """
        claims = self._claims("user")
        async with session_scope() as session:
            user = await UserRepository(session).get_user_by_id(int(claims["sub"]))
            if user is None:
                raise AuthRefreshError("User not found")
            record = user_record(user)
        token = create_session_token(str(record["id"]), "user")
        self.store.save(token, record)
        return {"token": token, "record": record}

    # PUBLIC_INTERFACE
    async def refresh_admin(self) -> Dict[str, Any]:
        """
        Re-validate an admin session and issue a fresh token.

        Returns:
            {"token": str, "admin": {...}} with the current admin record.
        Raises:
            AuthRefreshError: invalid/expired token or the admin no longer exists.
        """
        claims = self._claims("admin")
        async with session_scope() as session:
            admin = await UserRepository(session).get_admin_by_id(int(claims["sub"]))
            if admin is None:
                raise AuthRefreshError("Admin not found")
            record = admin_record(admin)
        token = create_session_token(str(record["id"]), "admin")
        self.store.save(token, record)
        return {"token": token, "admin": record}

    # PUBLIC_INTERFACE
    async def login_user(self, session: AsyncSession, identity: str, password: str) -> Dict[str, Any]:
        """Authenticate with username/email and password and bind the session to the user."""
        user = await UserRepository(session).get_user_by_identity(identity)
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthRefreshError("Invalid credentials")
        record = user_record(user)
        token = create_session_token(str(user.id), "user")
        self.store.save(token, record)
        return {"token": token, "record": record}

    # PUBLIC_INTERFACE
    async def login_admin(self, session: AsyncSession, email: str, password: str) -> Dict[str, Any]:
        """Authenticate an admin account and bind the session to it."""
        admin = await UserRepository(session).get_admin_by_email(email)
        if admin is None or not verify_password(password, admin.hashed_password):
            raise AuthRefreshError("Invalid credentials")
        record = admin_record(admin)
        token = create_session_token(str(admin.id), "admin")
        self.store.save(token, record)
        return {"token": token, "admin": record}

    def logout(self) -> None:
        self.store.clear()


# PUBLIC_INTERFACE
async def register_user(session: AsyncSession, payload: RegisterRequest) -> User:
    """
    Create a user together with the initial category every account starts with.

    Raises:
        ValueError: the username or email is already taken.
    """
    repo = UserRepository(session)
    if await repo.get_user_by_identity(payload.username) or await repo.get_user_by_identity(payload.email):
        raise ValueError("Username or email already in use")

    user = await repo.create_user(
        username=payload.username,
        email=payload.email,
        name=payload.name,
        hashed_password=get_password_hash(payload.password),
    )
    await create_initial_category(session, user.id)
    logger.info("Registered user %s", user.username)
    return user


async def create_initial_category(session: AsyncSession, owner_id: int) -> None:
    name = get_app_settings().DEFAULT_CATEGORY_NAME
    await CategoryRepository(session).create_category(
        CategoryCreate(name=name, slug=create_slug(name), owner_id=owner_id, initial=True)
    )
