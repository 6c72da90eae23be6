"""Dependency matcher for literate documents (Quarto / R Markdown style)."""

from __future__ import annotations

import re
from typing import List, Set

from .base import DependencyMatcher
from .utils import find_imports

_FENCE_RE = re.compile(r"^[ \t]{0,3}(?P<fence>`{3,}|~{3,})\s*(?P<info>.*)$")
_CHUNK_INFO_RE = re.compile(r"^\{\s*(?P<lang>[A-Za-z][\w-]*)(?P<options>[^}]*)\}")
_EVAL_FALSE_RE = re.compile(r"\beval\s*=\s*(?:false|F)\b", re.IGNORECASE)
_EVAL_FALSE_OPTION_RE = re.compile(r"^\s*#\|\s*eval\s*:\s*false\b", re.IGNORECASE)
_INLINE_RE = re.compile(r"`\{(?:python|py)\}\s+(?P<code>[^`]+)`")

PYTHON_ENGINES = {"python", "python3", "py"}


class LiterateMatcher(DependencyMatcher):
    """Scans executable Python chunks and inline expressions only.

    A chunk is executable when its fence info string is braced, such as
    ```` ```{python} ````. Display fences like ```` ```python ```` or
    ```` ```{.python} ```` are prose.
    """

    suffixes = (".qmd", ".rmd", ".md")

    def extract(self, text: str) -> Set[str]:
        found: Set[str] = set()
        for region in executable_regions(text):
            found.update(find_imports(region))
        return found


def executable_regions(text: str) -> List[str]:
    """Return the source of every executable Python region in ``text``."""
    regions: List[str] = []
    lines = text.splitlines()
    index = 0
    while index < len(lines):
        line = lines[index]
        match = _FENCE_RE.match(line)
        if not match:
            regions.extend(m.group("code") for m in _INLINE_RE.finditer(line))
            index += 1
            continue

        fence = match.group("fence")
        executable = _is_executable(match.group("info"))
        body: List[str] = []
        index += 1
        while index < len(lines) and not _closes(lines[index], fence):
            body.append(lines[index])
            index += 1
        index += 1  # closing fence, or past the end of an unclosed chunk

        if executable and not any(_EVAL_FALSE_OPTION_RE.match(row) for row in body):
            regions.append("\n".join(body))
    return regions


def _is_executable(info: str) -> bool:
    match = _CHUNK_INFO_RE.match(info.strip())
    if not match:
        return False
    if match.group("lang").lower() not in PYTHON_ENGINES:
        return False
    return not _EVAL_FALSE_RE.search(match.group("options"))


def _closes(line: str, fence: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped[0] != fence[0]:
        return False
    run = len(stripped) - len(stripped.lstrip(fence[0]))
    return run >= len(fence) and not stripped[run:].strip()
