"""Base classes for dependency matcher plugins."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Set, Tuple


class DependencyMatcher(ABC):
    """Contract for matchers that pull library names out of one source format."""

    suffixes: Tuple[str, ...] = ()

    def supports(self, path: Path) -> bool:
        """Return True when this matcher understands the file at ``path``."""
        return path.suffix.lower() in self.suffixes

    @abstractmethod
    def extract(self, text: str) -> Set[str]:
        """Return the library names referenced by ``text``."""
