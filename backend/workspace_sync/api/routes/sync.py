"""Sync routes — push files to an environment, browse task history."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sync.api.deps import get_current_user, sync_service
from workspace_sync.database import get_db
from workspace_sync.models.sync_task import SyncTaskStatus, TargetEnv
from workspace_sync.models.user import User
from workspace_sync.schemas.sync import SyncRequest, SyncTaskDetail, SyncTaskList, SyncTaskOut
from workspace_sync.services.sync_service import SyncService, SyncTaskQuery

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/workspaces/{workspace_id}/sync/{env}", response_model=SyncTaskOut)
async def sync_files(
    workspace_id: int,
    env: TargetEnv,
    body: SyncRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: SyncService = Depends(sync_service),
):
    """Upload the selected files; failures are reported in the task, not as errors."""
    logger.info(
        "Sync requested by %s: %d file(s) -> %s", current_user.username, len(body.files), env.value,
    )
    return await service.sync_files(db, workspace_id, env, body.files, current_user.id)


@router.get("/sync-tasks", response_model=SyncTaskList)
async def list_sync_tasks(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    workspace_name: str | None = None,
    file_name: str | None = None,
    file_path: str | None = None,
    modifier_name: str | None = None,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    status: SyncTaskStatus | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: SyncService = Depends(sync_service),
):
    query = SyncTaskQuery(
        page=page,
        page_size=page_size,
        workspace_name=workspace_name,
        file_name=file_name,
        file_path=file_path,
        modifier_name=modifier_name,
        start_time=start_time,
        end_time=end_time,
        status=status,
    )
    total, items = await service.list_tasks(db, query)
    return SyncTaskList(total=total, items=[SyncTaskOut.model_validate(t) for t in items])


@router.get("/sync-tasks/{task_id}", response_model=SyncTaskDetail)
async def get_sync_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: SyncService = Depends(sync_service),
):
    return await service.get_task(db, task_id)
