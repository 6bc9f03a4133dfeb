"""Materialize a directory tree from flat, path-addressed file records."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from workspace_sync.models.file_record import FileRecord
from workspace_sync.schemas.files import FileTreeNode

SEPARATOR = "/"


def split_path(path: str) -> list[str]:
    """Split a record path into segments, dropping empty ones."""
    return [part for part in path.split(SEPARATOR) if part]


def directory_etag(dir_path: str) -> str:
    """Synthetic fingerprint for a directory, derived from its path."""
    return f"dir-{dir_path}"


def materialize(records: Iterable[FileRecord]) -> list[FileTreeNode]:
    """Build a forest of :class:`FileTreeNode` from flat file records.

    Every ancestor segment of a record's path becomes a directory node,
    created once per call and memoized by its accumulated path. A
    directory's ``modified_time`` is the newest ``updated_at`` among the
    files below it, so the result does not depend on input order.
    Children are sorted directories first, then by name.
    """
    roots: list[FileTreeNode] = []
    dirs: dict[str, FileTreeNode] = {}

    for record in records:
        parts = split_path(record.file_path)
        modified: datetime = record.updated_at

        parent: FileTreeNode | None = None
        current = ""
        for part in parts[:-1]:
            current = f"{current}{SEPARATOR}{part}" if current else part
            node = dirs.get(current)
            if node is None:
                node = FileTreeNode(
                    name=part,
                    path=SEPARATOR + current,
                    size=0,
                    modified_time=modified,
                    etag=directory_etag(current),
                    is_directory=True,
                    children=[],
                )
                dirs[current] = node
                _attach(node, parent, roots)
            elif modified > node.modified_time:
                node.modified_time = modified
            parent = node

        # A path with no usable segments is still a file at the root
        name = parts[-1] if parts else record.file_path
        leaf = FileTreeNode(
            id=record.id,
            name=name,
            path=SEPARATOR + SEPARATOR.join(parts) if parts else SEPARATOR + name,
            size=record.size,
            modified_time=modified,
            etag=record.etag,
            is_directory=False,
        )
        _attach(leaf, parent, roots)

    _sort(roots)
    return roots


def _attach(node: FileTreeNode, parent: FileTreeNode | None, roots: list[FileTreeNode]) -> None:
    if parent is None:
        roots.append(node)
    else:
        parent.children.append(node)


def _sort(nodes: list[FileTreeNode]) -> None:
    nodes.sort(key=lambda n: (not n.is_directory, n.name, n.path))
    for node in nodes:
        if node.children:
            _sort(node.children)


def iter_nodes(nodes: Iterable[FileTreeNode]):
    """Depth-first walk over a materialized forest."""
    for node in nodes:
        yield node
        if node.children:
            yield from iter_nodes(node.children)
