"""
Form actions posted by the bookmarks UI.

Every action answers 200 with an ActionResult. Anonymous calls are turned away
by `authorized_action` before the form is read or the database is touched.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData

from bookmarks_api.api.forms import (
    form_text,
    parse_checkbox,
    parse_int,
    read_bookmark_form,
    read_category_form,
)
from bookmarks_api.core.deps import authorized_action, get_owner_id
from bookmarks_api.db.session import get_async_session
from bookmarks_api.repositories.bookmarks import BookmarkRepository
from bookmarks_api.repositories.categories import CategoryRepository
from bookmarks_api.repositories.users import UserRepository
from bookmarks_api.schemas.actions import ActionResult
from bookmarks_api.schemas.auth import Theme
from bookmarks_api.schemas.bookmarks import BookmarkUpdate
from bookmarks_api.schemas.categories import CategoryCreate, CategoryUpdate
from bookmarks_api.schemas.forms import CategoryForm
from bookmarks_api.services.bookmarks import BookmarkService, fetch_bookmark_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actions", tags=["Actions"])

BOOKMARK_NOT_FOUND = "Bookmark not found"

ACTION_RESPONSE = {"response_model": ActionResult, "response_model_exclude_none": True}


def _form_id(form: FormData) -> int:
    raw = form_text(form, "id")
    if raw is None:
        raise ValueError("Field 'id' is required")
    return int(raw)


async def _resolve_parent(session: AsyncSession, category: CategoryForm, owner_id: int) -> Optional[int]:
    # A parent the user does not own is dropped.
    if category.parent_id is None:
        return None
    if await CategoryRepository(session).is_owned(category.parent_id, owner_id):
        return category.parent_id
    logger.info("Ignoring foreign parent category %s", category.parent_id)
    return None


async def _update_bookmark_fields(session: AsyncSession, bookmark_id: int, owner_id: int, payload: BookmarkUpdate) -> ActionResult:
    async with session.begin():
        updated = await BookmarkRepository(session).update_bookmark(bookmark_id, owner_id, payload)
    if updated is None:
        return ActionResult(success=False, error=BOOKMARK_NOT_FOUND)
    return ActionResult(success=True)


# PUBLIC_INTERFACE
@router.post("/add-new-bookmark", summary="Add bookmark", **ACTION_RESPONSE)
@authorized_action()
async def add_new_bookmark(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """
    Create a bookmark from the form, with its images and tags, in one transaction.

    The form is validated and the images are downloaded before the transaction
    opens. Any failure, including malformed form input, is reported as
    `{success: false, error}`.
    """
    try:
        form = read_bookmark_form(await request.form())
        payload = form.to_create(owner_id)
        images = await fetch_bookmark_images(form.main_image_url, form.icon_url)
        async with session.begin():
            bookmark = await BookmarkService(session).create_bookmark(payload, form.tags, images)
    except Exception as exc:
        logger.warning("Adding bookmark failed: %s", exc)
        return ActionResult(success=False, error=str(exc))
    return ActionResult(success=True, bookmark=bookmark)


# PUBLIC_INTERFACE
@router.post("/delete-bookmark", summary="Delete bookmark", **ACTION_RESPONSE)
@authorized_action()
async def delete_bookmark(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    bookmark_id = _form_id(await request.form())
    async with session.begin():
        await BookmarkRepository(session).delete_bookmark(bookmark_id, owner_id)
    return ActionResult(success=True, id=bookmark_id)


# PUBLIC_INTERFACE
@router.post("/update-bookmark", summary="Update bookmark", **ACTION_RESPONSE)
@authorized_action()
async def update_bookmark(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """Update a bookmark and replace its tags; malformed input propagates to the error handler."""
    data = await request.form()
    bookmark_id = _form_id(data)
    form = read_bookmark_form(data)
    payload = form.to_update()
    images = await fetch_bookmark_images(form.main_image_url, form.icon_url)
    async with session.begin():
        bookmark = await BookmarkService(session).update_bookmark(bookmark_id, owner_id, payload, form.tags, images)
    if bookmark is None:
        return ActionResult(success=False, error=BOOKMARK_NOT_FOUND)
    return ActionResult(success=True, bookmark=bookmark)


# PUBLIC_INTERFACE
@router.post("/update-flagged", summary="Flag or unflag bookmark", **ACTION_RESPONSE)
@authorized_action()
async def update_flagged(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    data = await request.form()
    payload = BookmarkUpdate(flagged=parse_checkbox(form_text(data, "flagged")))
    return await _update_bookmark_fields(session, _form_id(data), owner_id, payload)


# PUBLIC_INTERFACE
@router.post("/update-importance", summary="Set bookmark importance", **ACTION_RESPONSE)
@authorized_action()
async def update_importance(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    data = await request.form()
    payload = BookmarkUpdate(importance=parse_int(form_text(data, "importance")))
    return await _update_bookmark_fields(session, _form_id(data), owner_id, payload)


# PUBLIC_INTERFACE
@router.post("/update-read", summary="Mark bookmark read or unread", **ACTION_RESPONSE)
@authorized_action()
async def update_read(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    data = await request.form()
    payload = BookmarkUpdate(read=parse_checkbox(form_text(data, "read")))
    return await _update_bookmark_fields(session, _form_id(data), owner_id, payload)


# PUBLIC_INTERFACE
@router.post("/update-increased-opened-count", summary="Count a bookmark open", **ACTION_RESPONSE)
@authorized_action()
async def update_increased_opened_count(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    bookmark_id = _form_id(await request.form())
    async with session.begin():
        found = await BookmarkRepository(session).increase_opened_count(bookmark_id, owner_id)
    if not found:
        return ActionResult(success=False, error=BOOKMARK_NOT_FOUND)
    return ActionResult(success=True)


# PUBLIC_INTERFACE
@router.post("/add-new-category", summary="Add category", **ACTION_RESPONSE)
@authorized_action()
async def add_new_category(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    form = read_category_form(await request.form())
    async with session.begin():
        parent_id = await _resolve_parent(session, form, owner_id)
        created = await CategoryRepository(session).create_category(
            CategoryCreate(**form.model_dump(exclude={"parent_id"}), parent_id=parent_id, owner_id=owner_id, initial=False)
        )
    return ActionResult(success=True, id=created.id)


# PUBLIC_INTERFACE
@router.post("/update-category", summary="Update category", **ACTION_RESPONSE)
@authorized_action()
async def update_category(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    data = await request.form()
    category_id = _form_id(data)
    form = read_category_form(data)
    async with session.begin():
        parent_id = await _resolve_parent(session, form, owner_id)
        if parent_id == category_id:
            parent_id = None
        await CategoryRepository(session).update_category(
            category_id, owner_id, CategoryUpdate(**form.model_dump(exclude={"parent_id"}), parent_id=parent_id)
        )
    return ActionResult(success=True)


# PUBLIC_INTERFACE
@router.post("/delete-category", summary="Delete category", **ACTION_RESPONSE)
@authorized_action(error=None)
async def delete_category(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    category_id = _form_id(await request.form())
    async with session.begin():
        await CategoryRepository(session).delete_category(category_id, owner_id)
    return ActionResult(success=True)


# PUBLIC_INTERFACE
@router.post("/change-theme", summary="Change UI theme", **ACTION_RESPONSE)
@authorized_action(error=None)
async def change_theme(
    request: Request,
    owner_id: Optional[int] = Depends(get_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """Store the picked theme in the user's settings; an unknown theme or a failed write is `{success: false}`."""
    try:
        theme = Theme(form_text(await request.form(), "theme"))
        async with session.begin():
            user = await UserRepository(session).update_user_settings(owner_id, {"theme": theme.value})
    except Exception as exc:
        logger.warning("Changing theme failed: %s", exc)
        return ActionResult(success=False)
    return ActionResult(success=user is not None)
