"""Core data models shared across reportfactory components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import FactoryConfig

FILES = "files"
DIRECTORIES = "directories"


@dataclass(frozen=True)
class Factory:
    """A validated factory root and its two named trees."""

    root: Path
    config: FactoryConfig

    @property
    def outputs(self) -> str:
        return self.config.outputs

    @property
    def sources_dir(self) -> Path:
        return self.root / self.config.report_sources

    @property
    def outputs_dir(self) -> Path:
        return self.root / self.config.outputs


@dataclass(frozen=True)
class SnapshotEntry:
    """One file or directory seen by a snapshot.

    ``mtime_ns`` is recorded for files only so that a file rewritten in place
    is reported as new, while directories compare on their path alone.
    """

    path: str
    kind: str
    mtime_ns: Optional[int] = None


@dataclass(frozen=True)
class DirectorySnapshot:
    """Point-in-time listing of either files or directories under a tree."""

    root: Path
    kind: str
    entries: Tuple[SnapshotEntry, ...]


@dataclass(frozen=True)
class HeaderDocument:
    """A literate document split into its YAML header and body text."""

    header: Dict[str, Any]
    body: str

    @property
    def params(self) -> Dict[str, Any]:
        params = self.header.get("params")
        return dict(params) if isinstance(params, dict) else {}


@dataclass
class CompilationResult:
    """Outcome of compiling one report."""

    report: str
    output_dir: Path
    relocated: List[Path] = field(default_factory=list)
    removed_dirs: List[Path] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)
