"""Regex helpers shared by dependency matchers."""

from __future__ import annotations

import re
from typing import Iterable, Set

_IMPORT_RE = re.compile(r"^import\s+(?P<names>.+)$")
_FROM_IMPORT_RE = re.compile(r"^from\s+(?P<module>\S+)\s+import\b")
_DYNAMIC_IMPORT_RE = re.compile(
    r"""(?:importlib\.import_module|__import__)\(\s*['"](?P<module>[A-Za-z_][\w.]*)['"]"""
)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_]\w*$")

_IGNORED_MODULES = {"__future__", "__main__"}


def top_level(module: str) -> str | None:
    """Return the importable top-level package of ``module``, if it is one."""
    if not module or module.startswith("."):
        return None
    head = module.split(".", 1)[0].strip()
    if not _IDENTIFIER_RE.match(head) or head in _IGNORED_MODULES:
        return None
    return head


def find_imports(code: str) -> Set[str]:
    """Return top-level library names imported by a block of Python code.

    Line based, so imports hidden in strings or split across unusual
    continuations are over- or under-reported.
    """
    found: Set[str] = set()
    for raw_line in code.splitlines():
        line = raw_line.split("#", 1)[0]
        for statement in line.split(";"):
            found.update(_statement_imports(statement.strip()))
        for match in _DYNAMIC_IMPORT_RE.finditer(line):
            name = top_level(match.group("module"))
            if name:
                found.add(name)
    return found


def _statement_imports(statement: str) -> Iterable[str]:
    match = _FROM_IMPORT_RE.match(statement)
    if match:
        name = top_level(match.group("module"))
        return [name] if name else []

    match = _IMPORT_RE.match(statement)
    if not match:
        return []
    names = []
    for part in match.group("names").split(","):
        tokens = part.strip().strip("()").split()
        if not tokens:
            continue
        name = top_level(tokens[0])
        if name:
            names.append(name)
    return names


__all__ = ["find_imports", "top_level"]
