"""Factory location, validation and scaffolding."""

from __future__ import annotations

import os
import textwrap
from pathlib import Path
from typing import List

from .config import (
    CONFIG_FILENAME,
    DEFAULT_OUTPUTS,
    DEFAULT_REPORT_SOURCES,
    FactoryConfig,
    dump_config,
    load_config,
)
from .errors import FactoryNotFound
from .logging import get_logger
from .models import Factory

TMP_PREFIX = "_reportfactory_tmp_"

logger = get_logger("factory")

_EXAMPLE_REPORT = """\
---
title: "Example report"
params:
  greeting: "hello"
---

This report was created by `reportfactory new`.

```{python}
import platform

print("Rendered with Python", platform.python_version())
```
"""

_README = """\
# {name}

Reports live in `{report_sources}/` and are compiled into timestamped folders
under `{outputs}/`.

```
reportfactory list
reportfactory compile
reportfactory deps
```
"""


def locate_factory(path: str | os.PathLike[str] = ".") -> Path:
    """Walk upwards from ``path`` until a factory root is found."""
    start = Path(path).expanduser().resolve()
    if not start.exists():
        raise FactoryNotFound(f"Path not found: {path}")
    if start.is_file():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / CONFIG_FILENAME).is_file():
            return candidate
        if (candidate / DEFAULT_REPORT_SOURCES).is_dir() and (candidate / DEFAULT_OUTPUTS).is_dir():
            return candidate

    raise FactoryNotFound(
        f"No report factory found at or above {start}; expected {CONFIG_FILENAME} "
        f"or '{DEFAULT_REPORT_SOURCES}' and '{DEFAULT_OUTPUTS}' folders"
    )


def validate_factory(factory: str | os.PathLike[str] = ".") -> Factory:
    """Locate the factory containing ``factory`` and check its layout."""
    root = locate_factory(factory)
    config = load_config(root)
    result = Factory(root=root, config=config)

    if not result.sources_dir.is_dir():
        raise FactoryNotFound(
            f"Factory at {root} is missing its '{config.report_sources}' folder"
        )
    if not result.outputs_dir.exists():
        logger.debug("Outputs folder %s does not exist yet", result.outputs_dir)
    elif not result.outputs_dir.is_dir():
        raise FactoryNotFound(f"Outputs path {result.outputs_dir} is not a directory")
    return result


def list_reports(factory: str | os.PathLike[str] | Factory = ".") -> List[str]:
    """Return report sources relative to the sources root, in lexical order."""
    resolved = factory if isinstance(factory, Factory) else validate_factory(factory)
    extensions = {ext.lower() for ext in resolved.config.report_extensions}
    sources_dir = resolved.sources_dir

    reports: List[str] = []
    for dirpath, dirnames, filenames in os.walk(sources_dir):
        dirnames[:] = [name for name in dirnames if not name.startswith(".")]
        current = Path(dirpath)
        for filename in filenames:
            if filename.startswith(TMP_PREFIX):
                continue
            if Path(filename).suffix.lower() not in extensions:
                continue
            reports.append((current / filename).relative_to(sources_dir).as_posix())
    return sorted(reports)


def list_outputs(factory: str | os.PathLike[str] | Factory = ".") -> List[str]:
    """Return every file stored under the outputs tree, relative to it."""
    resolved = factory if isinstance(factory, Factory) else validate_factory(factory)
    outputs_dir = resolved.outputs_dir
    if not outputs_dir.is_dir():
        return []
    return sorted(
        path.relative_to(outputs_dir).as_posix()
        for path in outputs_dir.rglob("*")
        if path.is_file()
    )


def new_factory(
    path: str | os.PathLike[str],
    *,
    name: str | None = None,
    report_sources: str = DEFAULT_REPORT_SOURCES,
    outputs: str = DEFAULT_OUTPUTS,
    create_readme: bool = True,
    create_example_report: bool = True,
    create_data_folders: bool = True,
    create_scripts_folder: bool = True,
) -> Path:
    """Create a new factory skeleton at ``path`` and return its root."""
    root = Path(path).expanduser().resolve()
    if root.exists() and any(root.iterdir()):
        raise FileExistsError(f"Refusing to create a factory in non-empty directory {root}")

    name = name or root.name
    root.mkdir(parents=True, exist_ok=True)
    (root / report_sources).mkdir()
    (root / outputs).mkdir()

    config = FactoryConfig(root=root, name=name, report_sources=report_sources, outputs=outputs)
    (root / CONFIG_FILENAME).write_text(dump_config(config), encoding="utf-8")
    (root / ".gitignore").write_text(f"/{outputs}/\n__pycache__/\n", encoding="utf-8")

    if create_data_folders:
        (root / "data" / "raw").mkdir(parents=True)
        (root / "data" / "clean").mkdir(parents=True)
    if create_scripts_folder:
        (root / "scripts").mkdir()
    if create_readme:
        readme = _README.format(name=name, report_sources=report_sources, outputs=outputs)
        (root / "README.md").write_text(readme, encoding="utf-8")
    if create_example_report:
        example = root / report_sources / "example_report.qmd"
        example.write_text(textwrap.dedent(_EXAMPLE_REPORT), encoding="utf-8")

    logger.info("New factory created at %s", root)
    return root


__all__ = [
    "TMP_PREFIX",
    "list_outputs",
    "list_reports",
    "locate_factory",
    "new_factory",
    "validate_factory",
]
