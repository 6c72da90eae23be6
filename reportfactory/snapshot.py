"""Directory snapshots and before/after diffing."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from .models import DIRECTORIES, FILES, DirectorySnapshot, SnapshotEntry


def snapshot_tree(root: Path, kind: str = FILES) -> DirectorySnapshot:
    """Return a fresh listing of files or directories under ``root``.

    Paths are relative to ``root`` in POSIX form and sorted, so two calls
    against an unchanged tree give equal snapshots.
    """
    if kind not in (FILES, DIRECTORIES):
        raise ValueError(f"Unknown snapshot kind: {kind}")
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(f"Snapshot root is not a directory: {root}")

    entries: List[SnapshotEntry] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        names = dirnames if kind == DIRECTORIES else filenames
        for name in names:
            path = current / name
            rel_path = path.relative_to(root).as_posix()
            if kind == DIRECTORIES:
                entries.append(SnapshotEntry(path=rel_path, kind=kind))
                continue
            try:
                mtime_ns = path.stat().st_mtime_ns
            except FileNotFoundError:
                # removed between listing and stat
                continue
            entries.append(SnapshotEntry(path=rel_path, kind=kind, mtime_ns=mtime_ns))

    entries.sort(key=lambda entry: entry.path)
    return DirectorySnapshot(root=root, kind=kind, entries=tuple(entries))


def diff_snapshots(before: DirectorySnapshot, after: DirectorySnapshot) -> List[SnapshotEntry]:
    """Return entries of ``after`` that are absent from ``before``."""
    if before.kind != after.kind:
        raise ValueError(f"Cannot diff a {before.kind} snapshot against a {after.kind} snapshot")
    if Path(before.root) != Path(after.root):
        raise ValueError(f"Snapshots were taken against different trees: {before.root}, {after.root}")

    seen = set(before.entries)
    return [entry for entry in after.entries if entry not in seen]


__all__ = ["diff_snapshots", "snapshot_tree"]
