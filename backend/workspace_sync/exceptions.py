"""Application-level exception types.

Convention:
- ``NotFoundError`` / ``ConflictError`` / ``ForbiddenError`` are raised by
  services and mapped to 404 / 409 / 403 by the handlers registered in
  ``workspace_sync.main``. Their message is safe to show to clients.
- ``UploadError`` never leaves the sync orchestrator: it marks a single
  file as failed and the batch carries on.
- ``ValueError`` is used for bad client input (e.g. an unusable file path)
  and is returned as a 422 detail.
"""

from __future__ import annotations


class WorkspaceSyncError(Exception):
    """Base class for domain errors."""


class NotFoundError(WorkspaceSyncError):
    """Workspace, user, file record or sync task does not exist."""


class ConflictError(WorkspaceSyncError):
    """A uniquely-keyed entity already exists."""


class ForbiddenError(WorkspaceSyncError):
    """The actor may not perform the operation."""


class UploadError(WorkspaceSyncError):
    """A file could not be read or pushed to the object store."""
