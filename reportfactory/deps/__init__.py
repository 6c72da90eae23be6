"""Static dependency extraction and matcher discovery.

Third-party packages add matchers for other file types by registering a
:class:`DependencyMatcher` subclass (or a zero-argument factory returning an
instance) under the ``reportfactory.dependency_matchers`` entry point group.
"""

from __future__ import annotations

from importlib import metadata
from typing import Dict, List

from .base import DependencyMatcher
from .literate import LiterateMatcher
from .notebook import NotebookMatcher
from .script import ScriptMatcher

_ENTRY_POINT_GROUP = "reportfactory.dependency_matchers"


def discover_matchers() -> List[DependencyMatcher]:
    """Return the built-in matchers followed by installed plugins.

    A plugin whose name shadows a built-in (or an earlier plugin) is skipped,
    so the built-in readers of ``.py``, ``.qmd``/``.rmd`` and ``.ipynb`` files
    always win.
    """
    matchers: Dict[str, DependencyMatcher] = {
        "script": ScriptMatcher(),
        "literate": LiterateMatcher(),
        "notebook": NotebookMatcher(),
    }
    for entry in metadata.entry_points().select(group=_ENTRY_POINT_GROUP):
        name = entry.name.lower()
        if name in matchers:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load dependency matcher '{entry.name}': {exc}") from exc
        matchers[name] = _instantiate(entry.name, loaded)
    return list(matchers.values())


def _instantiate(name: str, obj: object) -> DependencyMatcher:
    instance = obj() if callable(obj) and not isinstance(obj, DependencyMatcher) else obj
    if not isinstance(instance, DependencyMatcher):
        raise TypeError(f"Dependency matcher '{name}' must be a DependencyMatcher subclass or factory")
    return instance


from .collector import DependencyCollector, list_deps  # noqa: E402

__all__ = [
    "DependencyCollector",
    "DependencyMatcher",
    "LiterateMatcher",
    "NotebookMatcher",
    "ScriptMatcher",
    "discover_matchers",
    "list_deps",
]
