from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from bookmarks_api.core.settings import get_app_settings
from bookmarks_api.db.models import File
from bookmarks_api.repositories.files import FileRepository

logger = logging.getLogger(__name__)

# Session.info key for blobs written in the current transaction.
PENDING_PATHS = "storage.pending_paths"


def _keep_written(session: Session) -> None:
    session.info[PENDING_PATHS].clear()


def _remove_written(session: Session, previous_transaction) -> None:
    pending: List[Path] = session.info[PENDING_PATHS]
    for path in pending:
        try:
            path.unlink(missing_ok=True)
            logger.info("Removed %s after rollback", path)
        except OSError as exc:
            logger.warning("Could not remove %s after rollback: %s", path, exc)
    pending.clear()


def _pending_paths(session: AsyncSession) -> List[Path]:
    """Paths written in the session's open transaction, dropped again on rollback."""
    sync_session = session.sync_session
    pending = sync_session.info.get(PENDING_PATHS)
    if pending is None:
        pending = sync_session.info[PENDING_PATHS] = []
        event.listen(sync_session, "after_commit", _keep_written)
        event.listen(sync_session, "after_soft_rollback", _remove_written)
    return pending


class Storage:
    """
    Local-disk file storage with a `files` table index.

    Bytes are written under <root>/<owner_id>/ and the row keeps the relative path.
    A blob written inside a transaction that rolls back is deleted with it.
    """

    def __init__(self, session: AsyncSession, root: Optional[str | Path] = None) -> None:
        self.session = session
        self.root = Path(root or get_app_settings().STORAGE_DIR)
        self.repo = FileRepository(session)

    # PUBLIC_INTERFACE
    async def store_file(self, data: bytes, *, owner_id: int, file_name: str) -> List[File]:
        """
        Persist a blob for an owner.

        Returns:
            The created file rows; callers use the id of the first one.
        """
        relative = Path(str(owner_id)) / f"{uuid4().hex}-{file_name}"
        target = self.root / relative
        _pending_paths(self.session).append(target)
        await asyncio.to_thread(self._write, target, data)
        row = await self.repo.create_file(
            owner_id=owner_id, file_name=file_name, storage_path=relative.as_posix(), size=len(data)
        )
        logger.info("Stored file %s (%d bytes) for owner %s", file_name, len(data), owner_id)
        return [row]

    def path_for(self, row: File) -> Path:
        return self.root / row.storage_path

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
