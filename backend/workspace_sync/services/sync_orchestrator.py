"""Sync task orchestration — push a batch of files, record every outcome."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from workspace_sync.exceptions import NotFoundError
from workspace_sync.models.base import as_utc_naive, utcnow
from workspace_sync.models.sync_task import (
    SyncTask,
    SyncTaskRecord,
    SyncTaskRecordStatus,
    SyncTaskStatus,
    TargetEnv,
)
from workspace_sync.schemas.sync import SyncFileInfo
from workspace_sync.services.record_store import RecordStore
from workspace_sync.services.upload_gateway import UploadGateway

logger = logging.getLogger(__name__)


# Status only ever gets worse over the lifetime of a task.
VALID_TRANSITIONS: dict[SyncTaskStatus, set[SyncTaskStatus]] = {
    SyncTaskStatus.SUCCESS: {SyncTaskStatus.PARTIAL_SUCCESS, SyncTaskStatus.FAILED},
    SyncTaskStatus.PARTIAL_SUCCESS: {SyncTaskStatus.FAILED},
    SyncTaskStatus.FAILED: set(),
}


def aggregate_status(total_files: int, failed_files: int) -> SyncTaskStatus:
    """Task status as a pure function of its counters."""
    if failed_files <= 0:
        return SyncTaskStatus.SUCCESS
    if failed_files >= total_files:
        return SyncTaskStatus.FAILED
    return SyncTaskStatus.PARTIAL_SUCCESS


class ByteSource(Protocol):
    async def read(self, workspace_id: int, file_path: str) -> bytes: ...


class SyncOrchestrator:
    """Uploads each file once and keeps the task's aggregate status current.

    Files run on a pool of at most ``max_parallel`` workers. Reading bytes
    and uploading happen concurrently; every database write goes through
    ``_db_lock`` because the store wraps a single session.
    """

    def __init__(
        self,
        store: RecordStore,
        gateway: UploadGateway,
        byte_source: ByteSource,
        max_parallel: int = 1,
    ):
        self._store = store
        self._gateway = gateway
        self._bytes = byte_source
        self._max_parallel = max(1, max_parallel)
        self._db_lock = asyncio.Lock()

    async def synchronize(
        self,
        workspace_id: int,
        env: TargetEnv | str,
        files: Sequence[SyncFileInfo],
        actor_id: int,
        deadline: float | None = None,
    ) -> SyncTask:
        """Run one sync batch and return the persisted task.

        Per-file failures are data: they end up as failed records and in
        ``failed_files``. Once ``deadline`` (seconds) has passed no new
        file is started; uploads already under way finish and are
        recorded, the rest are skipped and leave no record.
        """
        env = TargetEnv(env)
        workspace = await self._store.get_workspace(workspace_id)
        if workspace is None:
            raise NotFoundError(f"Workspace {workspace_id} not found")
        actor = await self._store.get_user(actor_id)
        if actor is None:
            raise NotFoundError(f"User {actor_id} not found")

        task = SyncTask(
            workspace_id=workspace.id,
            creator_id=actor.id,
            target_env=env.value,
            status=SyncTaskStatus.SUCCESS.value,
            total_files=len(files),
            failed_files=0,
        )
        task.workspace = workspace
        task.creator = actor
        await self._store.create_task(task)
        logger.info(
            "Sync task %s started: %d file(s) -> %s (workspace %s)",
            task.id, len(files), env.value, workspace.id,
        )

        # Plain ids: a rollback expires ORM instances mid-batch
        task_id, workspace_pk, actor_pk = task.id, workspace.id, actor.id
        started = time.monotonic()
        stop_at = started + deadline if deadline is not None else None
        skipped = 0
        semaphore = asyncio.Semaphore(self._max_parallel)
        errors: list[BaseException] = []

        async def worker(info: SyncFileInfo) -> None:
            nonlocal skipped
            async with semaphore:
                if stop_at is not None and time.monotonic() >= stop_at:
                    skipped += 1
                    return
                record, error = await self._attempt(task_id, workspace_pk, env, info, actor_pk)
            await self._record_outcome(task, task_id, record, error, errors)

        results = await asyncio.gather(*(worker(info) for info in files), return_exceptions=True)
        errors.extend(r for r in results if isinstance(r, BaseException))
        if skipped:
            logger.warning(
                "Sync task %s hit its %.1fs deadline: %d file(s) not attempted",
                task_id, deadline, skipped,
            )

        logger.info(
            "Sync task %s finished in %.1fs: status=%s failed=%d/%d",
            task.id, time.monotonic() - started, task.status, task.failed_files, task.total_files,
        )
        if errors:
            raise errors[0]
        return task

    async def _attempt(
        self,
        task_id: int,
        workspace_id: int,
        env: TargetEnv,
        info: SyncFileInfo,
        actor_id: int,
    ) -> tuple[SyncTaskRecord, str | None]:
        """Read and upload one file. Returns the record shell and an error, if any."""
        record = self._store.create_task_record(
            task_id,
            file_path=info.path,
            file_name=info.name,
            file_size=info.size,
            file_md5=info.etag,
            last_modified=as_utc_naive(info.modified_time) if info.modified_time else utcnow(),
            modifier_id=actor_id,
            status=SyncTaskRecordStatus.SUCCESS.value,
        )
        try:
            content = await self._bytes.read(workspace_id, info.path)
            result = await self._gateway.upload(info.path, content, env)
        except Exception as exc:
            # Unreadable bytes or a local gateway fault count as a failed upload
            logger.warning("Sync task %s: %s failed locally: %s", task_id, info.path, exc)
            return record, str(exc) or exc.__class__.__name__

        if not result.success:
            logger.warning("Sync task %s: %s rejected: %s", task_id, info.path, result.error)
            return record, result.error or "Upload failed"
        return record, None

    async def _record_outcome(
        self,
        task: SyncTask,
        task_id: int,
        record: SyncTaskRecord,
        error: str | None,
        errors: list[BaseException],
    ) -> None:
        async with self._db_lock:
            try:
                if error is None:
                    await self._store.save_task_record(record)
                    return

                record.status = SyncTaskRecordStatus.FAILED.value
                record.error_message = error
                self._count_failure(task)
                await self._store.save_task(task, record)
            except SQLAlchemyError as exc:
                logger.error(
                    "Sync task %s: could not persist outcome for %s: %s",
                    task_id, record.file_path, exc,
                )
                errors.append(exc)
                await self._store.rollback()
                await self._store.refresh(task)
                if error is not None:
                    await self._save_counters(task, task_id, errors)

    async def _save_counters(
        self, task: SyncTask, task_id: int, errors: list[BaseException]
    ) -> None:
        """Keep the task counters true after its failed record was lost."""
        self._count_failure(task)
        try:
            await self._store.save_task(task)
        except SQLAlchemyError as exc:
            logger.error("Sync task %s: could not persist counters: %s", task_id, exc)
            errors.append(exc)
            await self._store.rollback()
            await self._store.refresh(task)

    def _count_failure(self, task: SyncTask) -> None:
        task.failed_files += 1
        self._advance(task, aggregate_status(task.total_files, task.failed_files))

    @staticmethod
    def _advance(task: SyncTask, new_status: SyncTaskStatus) -> None:
        current = SyncTaskStatus(task.status)
        if new_status == current:
            return
        if new_status not in VALID_TRANSITIONS[current]:
            logger.warning(
                "Invalid sync task transition: %s -> %s (task %s)", current, new_status, task.id,
            )
            return
        task.status = new_status.value
