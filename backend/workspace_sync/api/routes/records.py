"""File record routes — writes, flat listing, tree view, download."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sync.api.deps import get_current_user, workspace_service
from workspace_sync.database import get_db
from workspace_sync.exceptions import NotFoundError
from workspace_sync.models.user import User
from workspace_sync.schemas.files import FileRecordList, FileRecordOut, FileTreeResponse
from workspace_sync.services.workspace_service import WorkspaceService

router = APIRouter()


@router.post("/workspaces/{workspace_id}/records", response_model=FileRecordOut)
async def save_record(
    workspace_id: int,
    file: UploadFile = File(...),
    file_path: str = Form(...),
    etag: str | None = Form(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    """Store a file at ``file_path``; an existing record at that path is updated."""
    content = await file.read()
    return await service.save_file(
        db, workspace_id, file_path, content, current_user, etag=etag
    )


@router.get("/workspaces/{workspace_id}/records", response_model=FileRecordList)
async def list_records(
    workspace_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    records = await service.list_records(db, workspace_id)
    return FileRecordList(records=[FileRecordOut.model_validate(r) for r in records])


@router.get("/workspaces/{workspace_id}/tree", response_model=FileTreeResponse)
async def get_file_tree(
    workspace_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    """Hierarchical view of the workspace, rebuilt on every request."""
    nodes = await service.get_file_tree(db, workspace_id)
    return FileTreeResponse(workspace_id=workspace_id, records=nodes)


@router.get("/records/{record_id}/download")
async def download_record(
    record_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: WorkspaceService = Depends(workspace_service),
):
    record = await service.get_record(db, record_id)
    path = service.storage.resolve(record.workspace_id, record.file_path)
    if not path.is_file():
        raise NotFoundError(f"Staged bytes for record {record_id} are missing")
    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=path.name,
    )
