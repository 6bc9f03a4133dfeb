"""Sync task models — one batch per sync request, one record per file."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, String, DateTime, Integer, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workspace_sync.models.base import Base, utcnow
from workspace_sync.models.user import User
from workspace_sync.models.workspace import Workspace


class TargetEnv(str, Enum):
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class SyncTaskStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


class SyncTaskRecordStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class SyncTask(Base):
    __tablename__ = "sync_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workspace_id: Mapped[int] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    target_env: Mapped[str] = mapped_column(String(10), nullable=False)  # dev | test | prod
    status: Mapped[str] = mapped_column(
        String(20), default=SyncTaskStatus.SUCCESS.value, nullable=False
    )
    total_files: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failed_files: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    workspace: Mapped[Workspace] = relationship(lazy="joined")
    creator: Mapped[User] = relationship(lazy="joined")
    records: Mapped[list[SyncTaskRecord]] = relationship(
        back_populates="sync_task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return (
            f"<SyncTask(id={self.id}, env={self.target_env}, status={self.status}, "
            f"failed={self.failed_files}/{self.total_files})>"
        )


class SyncTaskRecord(Base):
    __tablename__ = "sync_task_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sync_task_id: Mapped[int] = mapped_column(
        ForeignKey("sync_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    file_md5: Mapped[str] = mapped_column(String(64), nullable=False)
    last_modified: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    modifier_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=SyncTaskRecordStatus.SUCCESS.value, nullable=False
    )  # success | failed
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    sync_task: Mapped[SyncTask] = relationship(back_populates="records")
    modifier: Mapped[User] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<SyncTaskRecord(id={self.id}, path='{self.file_path}', status={self.status})>"
