"""Walks a factory for the files ``list_deps`` should read."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Pattern

# environments, caches and render scratch space; never report sources
_SKIPPED_DIRS = {
    ".git",
    ".venv",
    "venv",
    "renv",
    "__pycache__",
    ".ipynb_checkpoints",
    ".quarto",
    ".Rproj.user",
}


class _Rule(NamedTuple):
    regex: Pattern[str]
    negate: bool
    directory_only: bool


def _glob_to_regex(glob: str) -> str:
    parts: List[str] = []
    index = 0
    while index < len(glob):
        char = glob[index]
        if glob.startswith("**/", index):
            parts.append(r"(?:.*/)?")
            index += 3
            continue
        if glob.startswith("**", index):
            parts.append(r".*")
            index += 2
            continue
        if char == "*":
            parts.append(r"[^/]*")
        elif char == "?":
            parts.append(r"[^/]")
        elif char == "[" and "]" in glob[index + 1 :]:
            end = glob.index("]", index + 1)
            parts.append(glob[index : end + 1])
            index = end + 1
            continue
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


def _compile_rule(line: str) -> _Rule | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    negate = line.startswith("!")
    line = line[1:] if negate else line
    directory_only = line.endswith("/")
    line = line.rstrip("/")
    # a slash anywhere but the end ties the pattern to the root
    anchored = "/" in line
    line = line.lstrip("/")
    if not line:
        return None
    prefix = "" if anchored else r"(?:.*/)?"
    return _Rule(re.compile(f"^{prefix}{_glob_to_regex(line)}$"), negate, directory_only)


class IgnoreRules:
    """Ordered .gitignore-style rules; the last matching rule decides."""

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self._rules = [rule for rule in map(_compile_rule, lines) if rule is not None]

    @classmethod
    def for_factory(cls, root: Path, exclude: Iterable[str] = ()) -> "IgnoreRules":
        gitignore = root / ".gitignore"
        lines = gitignore.read_text(encoding="utf-8").splitlines() if gitignore.is_file() else []
        lines.extend(f"/{name.strip('/')}/" for name in exclude)
        return cls(lines)

    def ignores(self, rel_path: str, is_dir: bool) -> bool:
        ignored = False
        for rule in self._rules:
            if rule.directory_only and not is_dir:
                continue
            if rule.regex.match(rel_path):
                ignored = not rule.negate
        return ignored


def iter_tracked_files(root: Path, exclude: Iterable[str] = ()) -> Iterator[Path]:
    """Yield files under ``root`` that are neither skipped nor gitignored.

    ``exclude`` holds extra root-relative directories to skip entirely, such
    as the outputs tree.
    """
    rules = IgnoreRules.for_factory(root, exclude)

    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        dirnames[:] = sorted(
            name
            for name in dirnames
            if name not in _SKIPPED_DIRS and not rules.ignores(prefix + name, True)
        )
        for filename in sorted(filenames):
            if not rules.ignores(prefix + filename, False):
                yield current / filename


__all__ = ["IgnoreRules", "iter_tracked_files"]
