"""Record store — persistence boundary for file records and sync tasks."""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from workspace_sync.models.file_record import FileRecord
from workspace_sync.models.sync_task import SyncTask, SyncTaskRecord
from workspace_sync.models.user import User
from workspace_sync.models.workspace import Workspace

logger = logging.getLogger(__name__)


class RecordStore:
    """Thin async repository over one database session.

    Every write commits immediately so other readers see progress.
    """

    def __init__(self, db: AsyncSession):
        self._db = db

    @property
    def session(self) -> AsyncSession:
        return self._db

    # --- lookups -----------------------------------------------------------

    async def get_workspace(self, workspace_id: int) -> Workspace | None:
        return await self._db.get(Workspace, workspace_id)

    async def get_user(self, user_id: int) -> User | None:
        return await self._db.get(User, user_id)

    # --- file records ------------------------------------------------------

    async def list_records(self, workspace_id: int) -> list[FileRecord]:
        result = await self._db.execute(
            select(FileRecord)
            .where(FileRecord.workspace_id == workspace_id)
            .order_by(FileRecord.created_at.desc(), FileRecord.id.desc())
        )
        return list(result.scalars().all())

    async def get_record(self, workspace_id: int, path: str) -> FileRecord | None:
        result = await self._db.execute(
            select(FileRecord).where(
                FileRecord.workspace_id == workspace_id,
                FileRecord.file_path == path,
            )
        )
        return result.scalar_one_or_none()

    async def find_path_conflict(self, workspace_id: int, path: str) -> FileRecord | None:
        """A record that is an ancestor of ``path`` or lives below it."""
        parts = path.split("/")
        ancestors = ["/".join(parts[:i]) for i in range(1, len(parts))]
        result = await self._db.execute(
            select(FileRecord)
            .where(
                FileRecord.workspace_id == workspace_id,
                or_(
                    FileRecord.file_path.in_(ancestors),
                    FileRecord.file_path.startswith(f"{path}/", autoescape=True),
                ),
            )
            .limit(1)
        )
        return result.scalars().first()

    async def get_record_by_id(self, record_id: int) -> FileRecord | None:
        return await self._db.get(FileRecord, record_id)

    async def save_record(self, record: FileRecord) -> FileRecord:
        self._db.add(record)
        await self._db.commit()
        return record

    # --- sync tasks --------------------------------------------------------

    async def create_task(self, task: SyncTask) -> SyncTask:
        self._db.add(task)
        await self._db.commit()
        logger.debug("Created %r", task)
        return task

    async def save_task(self, task: SyncTask, *records: SyncTaskRecord) -> SyncTask:
        """Persist task counters together with any records in one commit."""
        self._db.add(task)
        self._db.add_all(records)
        await self._db.commit()
        return task

    async def get_task(self, task_id: int, with_records: bool = False) -> SyncTask | None:
        stmt = select(SyncTask).where(SyncTask.id == task_id)
        if with_records:
            stmt = stmt.options(
                selectinload(SyncTask.records).joinedload(SyncTaskRecord.modifier)
            ).execution_options(populate_existing=True)
        result = await self._db.execute(stmt)
        return result.unique().scalar_one_or_none()

    def create_task_record(self, task_id: int, **fields) -> SyncTaskRecord:
        """Build an unsaved record shell bound to a task."""
        return SyncTaskRecord(sync_task_id=task_id, **fields)

    async def save_task_record(self, record: SyncTaskRecord) -> SyncTaskRecord:
        self._db.add(record)
        await self._db.commit()
        return record

    async def rollback(self) -> None:
        await self._db.rollback()

    async def refresh(self, instance) -> None:
        await self._db.refresh(instance)
