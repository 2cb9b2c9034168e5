from __future__ import annotations

import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bookmarks_api.core.deps import require_owner_id
from bookmarks_api.db.session import get_async_session
from bookmarks_api.repositories.files import FileRepository
from bookmarks_api.services.storage import Storage

router = APIRouter(prefix="/files", tags=["Files"])


# PUBLIC_INTERFACE
@router.get(
    "/{file_id}",
    response_class=FileResponse,
    summary="Download file",
    description="Stream a stored file (bookmark image or icon) owned by the current user.",
)
async def download_file(
    file_id: int,
    owner_id: int = Depends(require_owner_id),
    session: AsyncSession = Depends(get_async_session),
) -> FileResponse:
    row = await FileRepository(session).get_file_by_id(file_id, owner_id)
    if row is None:
        raise HTTPException(status_code=404, detail="File not found")
    path = Storage(session).path_for(row)
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File content missing")
    media_type = mimetypes.guess_type(row.file_name)[0] or "application/octet-stream"
    return FileResponse(path, media_type=media_type, filename=row.file_name)
