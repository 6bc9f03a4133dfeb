"""Sync task schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from workspace_sync.models.sync_task import SyncTaskRecordStatus, SyncTaskStatus, TargetEnv
from workspace_sync.schemas.workspace import UserRef, WorkspaceRef


class SyncFileInfo(BaseModel):
    """A file the caller wants pushed to the target environment."""
    id: int | None = None
    path: str
    name: str
    size: int = Field(ge=0)
    etag: str
    modified_time: datetime | None = None


class SyncRequest(BaseModel):
    files: list[SyncFileInfo]


class SyncTaskRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_path: str
    file_name: str
    file_size: int
    file_md5: str
    last_modified: datetime
    modifier: UserRef
    status: SyncTaskRecordStatus
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class SyncTaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workspace: WorkspaceRef
    creator: UserRef
    target_env: TargetEnv
    status: SyncTaskStatus
    total_files: int
    failed_files: int
    created_at: datetime
    updated_at: datetime


class SyncTaskDetail(SyncTaskOut):
    records: list[SyncTaskRecordOut] = []


class SyncTaskList(BaseModel):
    total: int
    items: list[SyncTaskOut]
