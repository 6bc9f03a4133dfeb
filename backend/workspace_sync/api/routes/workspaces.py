"""Workspace management routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sync.api.deps import get_current_user, workspace_service
from workspace_sync.database import get_db
from workspace_sync.models.user import User
from workspace_sync.schemas.workspace import WorkspaceCreate, WorkspaceOut
from workspace_sync.services.workspace_service import WorkspaceService

router = APIRouter()


@router.post("", response_model=WorkspaceOut, status_code=201)
async def create_workspace(
    body: WorkspaceCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    return await service.create_workspace(db, body.name, current_user)


@router.get("", response_model=list[WorkspaceOut])
async def list_workspaces(
    name: str | None = None,
    creator_name: str | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    return await service.list_workspaces(db, name=name, creator_name=creator_name)


@router.delete("/{workspace_id}", status_code=204)
async def delete_workspace(
    workspace_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    """Delete a workspace with its records and sync history (creator only)."""
    await service.delete_workspace(db, workspace_id, current_user)
