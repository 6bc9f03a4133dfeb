"""File record and file tree schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from workspace_sync.schemas.workspace import UserRef


class FileTreeNode(BaseModel):
    """One node of a materialized workspace tree (never persisted)."""
    id: int | None = None  # file record id; directories have none
    name: str
    path: str  # always starts with "/"
    size: int = 0
    modified_time: datetime
    etag: str
    is_directory: bool = False
    children: list[FileTreeNode] | None = None  # None for files


class FileTreeResponse(BaseModel):
    workspace_id: int
    records: list[FileTreeNode]


class FileRecordOut(BaseModel):
    """Flat file record as stored."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    workspace_id: int
    file_path: str
    etag: str
    size: int
    modifier: UserRef
    created_at: datetime
    updated_at: datetime


class FileRecordList(BaseModel):
    records: list[FileRecordOut]
