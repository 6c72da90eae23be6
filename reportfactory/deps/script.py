"""Dependency matcher for plain Python scripts."""

from __future__ import annotations

from typing import Set

from .base import DependencyMatcher
from .utils import find_imports


class ScriptMatcher(DependencyMatcher):
    """Scans the whole text of a script."""

    suffixes = (".py",)

    def extract(self, text: str) -> Set[str]:
        return find_imports(text)
