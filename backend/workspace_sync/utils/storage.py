"""Staged file bytes on local disk, one directory per workspace."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from workspace_sync.config import settings


def normalize_path(file_path: str) -> str:
    """Canonical record path: no leading/trailing "/", no empty segments.

    Raises ValueError for paths that are empty or climb out with "..".
    """
    parts = [p for p in file_path.replace("\\", "/").split("/") if p and p != "."]
    if not parts:
        raise ValueError("File path must not be empty")
    if any(p == ".." for p in parts):
        raise ValueError(f"File path must not contain '..': {file_path}")
    return "/".join(parts)


class WorkspaceStorage:
    """Reads and writes workspace files below ``base_dir/<workspace_id>/``."""

    def __init__(self, base_dir: str | Path | None = None):
        self._base_dir = Path(base_dir or settings.workspace_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def workspace_dir(self, workspace_id: int) -> Path:
        return self._base_dir / str(workspace_id)

    def resolve(self, workspace_id: int, file_path: str) -> Path:
        """Absolute on-disk location of a workspace file."""
        root = self.workspace_dir(workspace_id).resolve()
        target = (root / normalize_path(file_path)).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"Path escapes workspace: {file_path}")
        return target

    async def write(self, workspace_id: int, file_path: str, content: bytes) -> Path:
        target = self.resolve(workspace_id, file_path)
        await asyncio.to_thread(_write_bytes, target, content)
        return target

    async def read(self, workspace_id: int, file_path: str) -> bytes:
        """Read staged bytes. Raises FileNotFoundError when absent."""
        target = self.resolve(workspace_id, file_path)
        return await asyncio.to_thread(target.read_bytes)

    def remove_workspace(self, workspace_id: int) -> None:
        shutil.rmtree(self.workspace_dir(workspace_id), ignore_errors=True)


def _write_bytes(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
