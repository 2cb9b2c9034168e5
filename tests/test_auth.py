import asyncio
import json
from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from jose import jwt
from starlette.responses import Response

from bookmarks_api.api.main import create_app
from bookmarks_api.core.security import create_session_token, get_password_hash
from bookmarks_api.core.settings import AppSettings
from bookmarks_api.db import session_scope
from bookmarks_api.repositories.users import UserRepository
from bookmarks_api.services.auth import AuthStore
from conftest import COOKIE_NAME, cookie_header


def _session_cookie(response) -> str:
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{COOKIE_NAME}="):
            return header
    raise AssertionError("session cookie not set")


def _cookie_payload(header: str) -> dict:
    raw = header.split(";", 1)[0].split("=", 1)[1].strip('"')
    return json.loads(unquote(raw))


@pytest.fixture()
def state_client(app_schema):
    app = create_app(AppSettings())

    @app.get("/api/v1/whoami")
    async def whoami(request: Request):
        return {"user": request.state.user}

    @app.get("/api/v1/admin/whoami")
    async def admin_whoami(request: Request):
        return {"user": request.state.user}

    with TestClient(app) as c:
        yield c


def test_store_round_trips_through_cookie():
    store = AuthStore(COOKIE_NAME)
    store.save(create_session_token("7", "user"), {"id": 7, "username": "alice", "collection": "users"})
    response = Response()
    store.export_to_cookie(response)
    header = response.headers["set-cookie"]
    assert "samesite=strict" in header.lower()
    assert "httponly" not in header.lower()

    loaded = AuthStore(COOKIE_NAME)
    loaded.load_from_cookie(header.split(";", 1)[0])
    assert loaded.token == store.token
    assert loaded.model == store.model
    assert loaded.is_valid


def test_garbled_cookie_clears_store():
    store = AuthStore(COOKIE_NAME)
    store.load_from_cookie(f"{COOKIE_NAME}=%7Bnot-json")
    assert store.token == "" and store.model is None
    assert not store.is_valid


def test_anonymous_request_gets_expired_cookie(state_client):
    response = state_client.get("/api/v1/whoami")
    assert response.json() == {"user": None}
    assert "max-age=0" in _session_cookie(response).lower()


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        jwt.encode({"sub": "1", "type": "user"}, "wrong-secret", algorithm="HS256"),
        jwt.encode(
            {"sub": "1", "type": "user", "exp": datetime.now(tz=timezone.utc) - timedelta(minutes=1)},
            "test-secret",
            algorithm="HS256",
        ),
    ],
)
def test_invalid_or_expired_cookie_signs_out(state_client, register, token):
    alice = register("alice")
    response = state_client.get("/api/v1/whoami", headers=cookie_header(alice, token=token))
    assert response.json() == {"user": None}
    assert "max-age=0" in _session_cookie(response).lower()


def test_valid_cookie_is_refreshed(state_client, register):
    alice = register("alice")
    old_token = create_session_token(str(alice["id"]), "user", expires_minutes=1)
    response = state_client.get("/api/v1/whoami", headers=cookie_header(alice, token=old_token))

    user = response.json()["user"]
    assert user["username"] == "alice"
    assert user["collection"] == "users"
    payload = _cookie_payload(_session_cookie(response))
    assert payload["token"] != old_token
    assert payload["model"]["id"] == alice["id"]


def test_deleted_user_is_signed_out(state_client):
    ghost = {"id": 424242, "username": "ghost", "collection": "users"}
    response = state_client.get("/api/v1/whoami", headers=cookie_header(ghost))
    assert response.json() == {"user": None}


def test_register_login_me_logout(client):
    registered = client.post(
        "/api/v1/auth/register",
        json={"username": "carol", "email": "carol@example.com", "password": "password123"},
    )
    assert registered.status_code == 201
    assert registered.json()["username"] == "carol"

    duplicate = client.post(
        "/api/v1/auth/register",
        json={"username": "carol", "email": "other@example.com", "password": "password123"},
    )
    assert duplicate.status_code == 400

    bad = client.post("/api/v1/auth/login", json={"identity": "carol", "password": "wrong-password"})
    assert bad.status_code == 401
    assert bad.json()["error"]["type"] == "http_error"

    login = client.post("/api/v1/auth/login", json={"identity": "carol@example.com", "password": "password123"})
    assert login.status_code == 200
    cookie = _cookie_payload(_session_cookie(login))
    assert cookie["token"] == login.json()["token"]
    assert cookie["model"]["username"] == "carol"

    me = client.get("/api/v1/auth/me", headers=cookie_header(cookie["model"], token=cookie["token"]))
    assert me.status_code == 200
    assert me.json()["email"] == "carol@example.com"

    logout = client.post("/api/v1/auth/logout", headers=cookie_header(cookie["model"], token=cookie["token"]))
    assert logout.json() == {"message": "Logged out"}
    assert "max-age=0" in _session_cookie(logout).lower()


def test_me_requires_session(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401


async def _create_admin() -> int:
    async with session_scope() as s:
        admin = await UserRepository(s).create_admin(
            email="root@example.com", hashed_password=get_password_hash("admin-password")
        )
        return admin.id


def test_admin_session_refreshes_on_admin_paths(state_client):
    asyncio.run(_create_admin())
    login = state_client.post(
        "/api/v1/admin/auth/login", json={"email": "root@example.com", "password": "admin-password"}
    )
    assert login.status_code == 200
    cookie = _cookie_payload(_session_cookie(login))
    assert cookie["model"]["collection"] == "admins"

    headers = cookie_header(cookie["model"], token=cookie["token"])
    admin_view = state_client.get("/api/v1/admin/whoami", headers=headers)
    assert admin_view.json()["user"]["email"] == "root@example.com"

    # Outside the admin prefix the same token is not a user session.
    user_view = state_client.get("/api/v1/whoami", headers=headers)
    assert user_view.json() == {"user": None}
