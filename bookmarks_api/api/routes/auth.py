from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.core.deps import get_auth_client, require_owner_id
from bookmarks_api.db.session import get_async_session
from bookmarks_api.repositories.serialize import serialize_user
from bookmarks_api.repositories.users import UserRepository
from bookmarks_api.schemas.auth import (
    AdminLoginRequest,
    AuthResponse,
    LoginRequest,
    Message,
    RegisterRequest,
    UserRead,
)
from bookmarks_api.services.auth import AuthClient, AuthRefreshError, register_user

router = APIRouter(prefix="/auth", tags=["Auth"])
admin_router = APIRouter(prefix="/admin/auth", tags=["Auth"])


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Create a new user together with their initial category.",
)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    """Register a new user account."""
    try:
        async with session.begin():
            user = await register_user(session, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return serialize_user(user)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Authenticate with username or email and password. The session cookie is set on the response.",
)
async def login(
    payload: LoginRequest,
    client: AuthClient = Depends(get_auth_client),
    session: AsyncSession = Depends(get_async_session),
) -> AuthResponse:
    try:
        result = await client.login_user(session, payload.identity, payload.password)
    except AuthRefreshError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return AuthResponse(token=result["token"], record=result["record"])


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=Message,
    summary="Logout",
    description="Clear the session; the response expires the session cookie.",
)
async def logout(client: AuthClient = Depends(get_auth_client)) -> Message:
    client.logout()
    return Message(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the user bound to the session cookie.",
)
async def read_current_user(
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    user = await UserRepository(session).get_user_by_id(owner_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return serialize_user(user)


# PUBLIC_INTERFACE
@admin_router.post(
    "/login",
    response_model=AuthResponse,
    summary="Admin login",
    description="Authenticate an admin account. The session cookie is set on the response.",
)
async def admin_login(
    payload: AdminLoginRequest,
    client: AuthClient = Depends(get_auth_client),
    session: AsyncSession = Depends(get_async_session),
) -> AuthResponse:
    try:
        result = await client.login_admin(session, payload.email, payload.password)
    except AuthRefreshError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return AuthResponse(token=result["token"], record=result["admin"])
