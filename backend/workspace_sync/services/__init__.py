"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from workspace_sync.config import settings

if TYPE_CHECKING:
    from workspace_sync.services.sync_service import SyncService
    from workspace_sync.services.upload_gateway import UploadGateway
    from workspace_sync.services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)

_workspace_service: WorkspaceService | None = None
_sync_service: SyncService | None = None


def init_services(gateway: UploadGateway | None = None) -> None:
    """Create and wire up all service singletons."""
    global _workspace_service, _sync_service

    from workspace_sync.services.sync_service import SyncService
    from workspace_sync.services.upload_gateway import OssUploadGateway
    from workspace_sync.services.workspace_service import WorkspaceService
    from workspace_sync.utils.storage import WorkspaceStorage

    storage = WorkspaceStorage(settings.workspace_dir)
    storage.base_dir.mkdir(parents=True, exist_ok=True)

    _workspace_service = WorkspaceService(storage)
    _sync_service = SyncService(gateway or OssUploadGateway(), storage)

    if settings.is_dev_mode:
        logger.warning("Running in dev mode — uploads are logged, not sent")
    elif not settings.oss_access_key_id:
        logger.warning(
            "Object store credentials not configured (WSYNC_OSS_ACCESS_KEY_ID) — "
            "every sync will fail"
        )
    logger.info("Services initialized (workspace dir %s)", storage.base_dir)


def shutdown_services() -> None:
    global _workspace_service, _sync_service
    _workspace_service = None
    _sync_service = None


def get_workspace_service() -> WorkspaceService:
    if _workspace_service is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _workspace_service


def get_sync_service() -> SyncService:
    if _sync_service is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _sync_service
