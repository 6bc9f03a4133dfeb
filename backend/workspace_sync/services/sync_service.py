"""Sync entry points — run batches and query their history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sync.config import settings
from workspace_sync.exceptions import NotFoundError
from workspace_sync.models.sync_task import SyncTask, SyncTaskRecord, SyncTaskStatus, TargetEnv
from workspace_sync.models.user import User
from workspace_sync.models.workspace import Workspace
from workspace_sync.schemas.sync import SyncFileInfo
from workspace_sync.services.record_store import RecordStore
from workspace_sync.services.sync_orchestrator import ByteSource, SyncOrchestrator
from workspace_sync.services.upload_gateway import UploadGateway

logger = logging.getLogger(__name__)


@dataclass
class SyncTaskQuery:
    page: int = 1
    page_size: int = 20
    workspace_name: str | None = None
    file_name: str | None = None
    file_path: str | None = None
    modifier_name: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: SyncTaskStatus | None = None


class SyncService:
    """Wires the orchestrator to the configured gateway and byte source."""

    def __init__(
        self,
        gateway: UploadGateway,
        byte_source: ByteSource,
        max_parallel: int | None = None,
        deadline: float | None = None,
    ):
        self._gateway = gateway
        self._bytes = byte_source
        self._max_parallel = max_parallel or settings.sync_max_parallel
        self._deadline = deadline if deadline is not None else settings.sync_deadline_seconds

    async def sync_files(
        self,
        db: AsyncSession,
        workspace_id: int,
        env: TargetEnv,
        files: Sequence[SyncFileInfo],
        actor_id: int,
    ) -> SyncTask:
        orchestrator = SyncOrchestrator(
            RecordStore(db),
            self._gateway,
            self._bytes,
            max_parallel=self._max_parallel,
        )
        return await orchestrator.synchronize(
            workspace_id, env, files, actor_id, deadline=self._deadline
        )

    async def get_task(self, db: AsyncSession, task_id: int) -> SyncTask:
        task = await RecordStore(db).get_task(task_id, with_records=True)
        if task is None:
            raise NotFoundError(f"Sync task {task_id} not found")
        return task

    async def list_tasks(self, db: AsyncSession, query: SyncTaskQuery) -> tuple[int, list[SyncTask]]:
        """Paginated task history, newest first."""
        conditions = []
        if query.workspace_name:
            conditions.append(
                SyncTask.workspace_id.in_(
                    select(Workspace.id).where(Workspace.name.contains(query.workspace_name))
                )
            )
        if query.status:
            conditions.append(SyncTask.status == SyncTaskStatus(query.status).value)
        if query.start_time:
            conditions.append(SyncTask.created_at >= query.start_time)
        if query.end_time:
            conditions.append(SyncTask.created_at <= query.end_time)

        # Record-level filters select tasks with at least one matching record
        record_conditions = []
        if query.file_name:
            record_conditions.append(SyncTaskRecord.file_name.contains(query.file_name))
        if query.file_path:
            record_conditions.append(SyncTaskRecord.file_path.contains(query.file_path))
        if query.modifier_name:
            record_conditions.append(
                SyncTaskRecord.modifier_id.in_(
                    select(User.id).where(User.username.contains(query.modifier_name))
                )
            )
        if record_conditions:
            conditions.append(
                SyncTask.id.in_(select(SyncTaskRecord.sync_task_id).where(*record_conditions))
            )

        total = await db.scalar(select(func.count(SyncTask.id)).where(*conditions))
        page = max(1, query.page)
        result = await db.execute(
            select(SyncTask)
            .where(*conditions)
            .order_by(SyncTask.created_at.desc(), SyncTask.id.desc())
            .offset((page - 1) * query.page_size)
            .limit(query.page_size)
        )
        return total or 0, list(result.unique().scalars().all())
