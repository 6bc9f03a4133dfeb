"""Workspaces and their file records."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sync.exceptions import ConflictError, ForbiddenError, NotFoundError
from workspace_sync.models.base import utcnow
from workspace_sync.models.file_record import FileRecord
from workspace_sync.models.user import User
from workspace_sync.models.workspace import Workspace
from workspace_sync.schemas.files import FileTreeNode
from workspace_sync.services.file_tree import materialize
from workspace_sync.services.record_store import RecordStore
from workspace_sync.utils.hashing import md5_bytes
from workspace_sync.utils.storage import WorkspaceStorage, normalize_path

logger = logging.getLogger(__name__)


class WorkspaceService:
    """Workspace CRUD, file writes, and tree views."""

    def __init__(self, storage: WorkspaceStorage):
        self._storage = storage

    @property
    def storage(self) -> WorkspaceStorage:
        return self._storage

    async def create_workspace(self, db: AsyncSession, name: str, creator: User) -> Workspace:
        existing = await db.execute(select(Workspace).where(Workspace.name == name))
        if existing.scalar_one_or_none():
            raise ConflictError(f"Workspace '{name}' already exists")

        workspace = Workspace(name=name, creator_id=creator.id)
        workspace.creator = creator
        db.add(workspace)
        await db.commit()
        logger.info("Workspace %s '%s' created by %s", workspace.id, name, creator.username)
        return workspace

    async def list_workspaces(
        self,
        db: AsyncSession,
        name: str | None = None,
        creator_name: str | None = None,
    ) -> list[Workspace]:
        stmt = select(Workspace).join(Workspace.creator).order_by(Workspace.created_at.desc())
        if name:
            stmt = stmt.where(Workspace.name.contains(name))
        if creator_name:
            stmt = stmt.where(User.username.contains(creator_name))
        result = await db.execute(stmt)
        return list(result.unique().scalars().all())

    async def delete_workspace(self, db: AsyncSession, workspace_id: int, actor: User) -> None:
        workspace = await self.get_workspace(db, workspace_id)
        if workspace.creator_id != actor.id:
            raise ForbiddenError("Only the creator may delete a workspace")

        await db.delete(workspace)
        await db.commit()
        self._storage.remove_workspace(workspace_id)
        logger.info("Workspace %s deleted by %s", workspace_id, actor.username)

    async def get_workspace(self, db: AsyncSession, workspace_id: int) -> Workspace:
        workspace = await RecordStore(db).get_workspace(workspace_id)
        if workspace is None:
            raise NotFoundError(f"Workspace {workspace_id} not found")
        return workspace

    async def save_file(
        self,
        db: AsyncSession,
        workspace_id: int,
        file_path: str,
        content: bytes,
        modifier: User,
        etag: str | None = None,
    ) -> FileRecord:
        """Stage bytes and upsert the record for (workspace, path)."""
        await self.get_workspace(db, workspace_id)
        path = normalize_path(file_path)
        store = RecordStore(db)

        clash = await store.find_path_conflict(workspace_id, path)
        if clash is not None:
            raise ConflictError(f"'{path}' collides with existing file '{clash.file_path}'")
        try:
            await self._storage.write(workspace_id, path, content)
        except (FileExistsError, IsADirectoryError, NotADirectoryError) as exc:
            raise ConflictError(f"'{path}' collides with a staged file or directory") from exc

        record = await store.get_record(workspace_id, path)
        if record is None:
            record = FileRecord(workspace_id=workspace_id, file_path=path)
        else:
            record.updated_at = utcnow()
        record.etag = etag or md5_bytes(content)
        record.size = len(content)
        record.modifier_id = modifier.id
        record.modifier = modifier

        await store.save_record(record)
        logger.info("Saved %s in workspace %s (%d bytes)", path, workspace_id, record.size)
        return record

    async def list_records(self, db: AsyncSession, workspace_id: int) -> list[FileRecord]:
        await self.get_workspace(db, workspace_id)
        return await RecordStore(db).list_records(workspace_id)

    async def get_file_tree(self, db: AsyncSession, workspace_id: int) -> list[FileTreeNode]:
        await self.get_workspace(db, workspace_id)
        records = await RecordStore(db).list_records(workspace_id)
        return materialize(records)

    async def get_record(self, db: AsyncSession, record_id: int) -> FileRecord:
        record = await RecordStore(db).get_record_by_id(record_id)
        if record is None:
            raise NotFoundError(f"File record {record_id} not found")
        return record
