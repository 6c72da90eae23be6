"""Aggregates dependency matches across the files of a factory."""

from __future__ import annotations

import importlib.util
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from ..factory import validate_factory
from ..logging import get_logger
from ..models import Factory
from ..scanner import iter_tracked_files
from .base import DependencyMatcher


class DependencyCollector:
    """Runs the first matching matcher over each file and unions the results."""

    def __init__(self, matchers: Optional[Sequence[DependencyMatcher]] = None) -> None:
        if matchers is None:
            from . import discover_matchers

            matchers = discover_matchers()
        self.matchers = list(matchers)
        self.logger = get_logger("deps")

    def matcher_for(self, path: Path) -> DependencyMatcher | None:
        for matcher in self.matchers:
            if matcher.supports(path):
                return matcher
        return None

    def extract_file(self, path: Path) -> Set[str]:
        matcher = self.matcher_for(path)
        if matcher is None:
            return set()
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            self.logger.warning("Skipping unreadable file %s: %s", path, exc)
            return set()
        found = matcher.extract(text)
        self.logger.debug("%s: %s", path.name, ", ".join(sorted(found)) or "(none)")
        return found

    def collect(self, paths: Iterable[Path]) -> Set[str]:
        found: Set[str] = set()
        for path in paths:
            found.update(self.extract_file(path))
        return found


def list_deps(
    factory: str | os.PathLike[str] | Factory = ".",
    *,
    missing: bool = False,
    matchers: Optional[Sequence[DependencyMatcher]] = None,
) -> List[str]:
    """Return the sorted library names referenced by the factory's sources.

    Every tracked file a matcher understands is scanned, except for the
    outputs tree. With ``missing`` only names the current interpreter cannot
    import are returned.
    """
    resolved = factory if isinstance(factory, Factory) else validate_factory(factory)
    collector = DependencyCollector(matchers)
    paths = iter_tracked_files(resolved.root, exclude=[resolved.outputs])
    names = collector.collect(paths)
    if missing:
        names = {name for name in names if not _is_installed(name)}
    return sorted(names)


def _is_installed(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False
