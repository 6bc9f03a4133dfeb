"""SQLAlchemy ORM models for the workspace sync service."""

from workspace_sync.models.base import Base
from workspace_sync.models.user import User
from workspace_sync.models.workspace import Workspace
from workspace_sync.models.file_record import FileRecord
from workspace_sync.models.sync_task import (
    SyncTask,
    SyncTaskRecord,
    SyncTaskRecordStatus,
    SyncTaskStatus,
    TargetEnv,
)

__all__ = [
    "Base",
    "User",
    "Workspace",
    "FileRecord",
    "SyncTask",
    "SyncTaskRecord",
    "SyncTaskRecordStatus",
    "SyncTaskStatus",
    "TargetEnv",
]
