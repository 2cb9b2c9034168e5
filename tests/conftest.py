from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from bookmarks_api.core.security import create_session_token
from bookmarks_api.core.settings import AppSettings, get_app_settings
from bookmarks_api.db import Base, get_engine, get_session_maker, session_scope
from bookmarks_api.schemas.auth import RegisterRequest
from bookmarks_api.services.auth import register_user, user_record

COOKIE_NAME = "bookmarks_auth"


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'bookmarks.db'}")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "files"))
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")
    monkeypatch.setenv("AUTH_COOKIE_NAME", COOKIE_NAME)
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "false")
    monkeypatch.setenv("AUTO_SEED", "false")
    # Every test gets an engine bound to its own database file.
    monkeypatch.setattr("bookmarks_api.db.session._ENGINE", None)
    monkeypatch.setattr("bookmarks_api.db.session._SESSION_MAKER", None)
    get_app_settings.cache_clear()
    yield
    get_app_settings.cache_clear()


async def _create_schema() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _register(username: str) -> Dict[str, Any]:
    async with session_scope() as s:
        user = await register_user(
            s,
            RegisterRequest(
                username=username,
                email=f"{username}@example.com",
                password="password123",
                name=username.title(),
            ),
        )
        return user_record(user)


def cookie_header(record: Optional[Dict[str, Any]], token: Optional[str] = None) -> Dict[str, str]:
    """`cookie` header carrying a session for the given account record."""
    if token is None:
        account_type = "admin" if record and record.get("collection") == "admins" else "user"
        token = create_session_token(str(record["id"]), account_type)
    value = quote(json.dumps({"token": token, "model": record}))
    return {"cookie": f"{COOKIE_NAME}={value}"}


# Async tests


@pytest.fixture()
async def schema():
    await _create_schema()


@pytest.fixture()
async def session(schema):
    async with get_session_maker()() as s:
        yield s


@pytest.fixture()
async def make_user(schema):
    """Register a user (with the initial category) and return its session record."""
    return _register


# HTTP tests (sync; the TestClient runs the app on its own event loop)


@pytest.fixture()
def app_schema():
    asyncio.run(_create_schema())


@pytest.fixture()
def register(app_schema):
    def _make(username: str) -> Dict[str, Any]:
        return asyncio.run(_register(username))

    return _make


def _build_app():
    from bookmarks_api.api.main import create_app

    return create_app(AppSettings())


@pytest.fixture()
def client(app_schema):
    with TestClient(_build_app()) as c:
        yield c


@pytest.fixture()
def lenient_client(app_schema):
    """Client that answers 500 instead of re-raising server errors."""
    with TestClient(_build_app(), raise_server_exceptions=False) as c:
        yield c
