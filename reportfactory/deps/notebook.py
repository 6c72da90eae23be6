"""Dependency matcher for Jupyter notebooks."""

from __future__ import annotations

import json
from typing import Any, List, Set

from ..logging import get_logger
from .base import DependencyMatcher
from .utils import find_imports

logger = get_logger("deps.notebook")


class NotebookMatcher(DependencyMatcher):
    """Scans the code cells of Python notebooks."""

    suffixes = (".ipynb",)

    def extract(self, text: str) -> Set[str]:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.debug("Skipping unreadable notebook: %s", exc)
            return set()
        if not isinstance(payload, dict) or not _is_python(payload):
            return set()

        found: Set[str] = set()
        for cell in payload.get("cells") or []:
            if not isinstance(cell, dict) or cell.get("cell_type") != "code":
                continue
            found.update(find_imports(_strip_magics(_cell_source(cell))))
        return found


def _is_python(payload: dict[str, Any]) -> bool:
    metadata = payload.get("metadata")
    if not isinstance(metadata, dict):
        return True
    kernelspec = metadata.get("kernelspec")
    language = kernelspec.get("language") if isinstance(kernelspec, dict) else None
    if language is None:
        info = metadata.get("language_info")
        language = info.get("name") if isinstance(info, dict) else None
    return language is None or str(language).lower() == "python"


def _cell_source(cell: dict[str, Any]) -> str:
    source = cell.get("source")
    if isinstance(source, list):
        return "".join(str(line) for line in source)
    return source if isinstance(source, str) else ""


def _strip_magics(code: str) -> str:
    lines: List[str] = [
        line for line in code.splitlines() if not line.lstrip().startswith(("%", "!"))
    ]
    return "\n".join(lines)
