"""Compilation pipeline: selection, isolated rendering and artifact capture."""

from __future__ import annotations

import os
import shutil
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .config import validate_on_error
from .errors import EmptyReportSet, RenderError
from .factory import list_reports, validate_factory
from .header import merged_document
from .logging import get_logger, warn_cleanup
from .models import DIRECTORIES, FILES, CompilationResult, Factory, SnapshotEntry
from .render import IsolatedRenderer, RenderRequest
from .selection import SelectorInput, build_selector, select_reports
from .snapshot import diff_snapshots, snapshot_tree

TIMESTAMP_FORMAT = "%Y-%m-%d_T%H-%M-%S"

logger = get_logger("pipeline")


def _now() -> datetime:
    return datetime.now()


def format_timestamp(moment: datetime | None = None) -> str:
    """Format ``moment`` (default: now) as an output folder name."""
    return (moment or _now()).strftime(TIMESTAMP_FORMAT)


def format_params(params: Mapping[str, Any]) -> str:
    return ", ".join(f"{name} = {value}" for name, value in params.items())


class ArtifactCapturer:
    """Compiles one report at a time and moves what it produced into outputs.

    Files and directories under the sources tree are snapshotted around the
    render; anything new is treated as an output of that report. This only
    holds while nothing else writes to the sources tree, so reports must be
    compiled sequentially.
    """

    def __init__(self, factory: Factory, renderer: IsolatedRenderer) -> None:
        self.factory = factory
        self.renderer = renderer
        self.logger = get_logger("capture")

    def output_dir_for(self, report: str, timestamp: str, subfolder: str | None = None) -> Path:
        relative = PurePosixPath(report).with_suffix("")
        output_dir = self.factory.outputs_dir.joinpath(*relative.parts)
        if subfolder:
            output_dir = output_dir / subfolder
        return output_dir / timestamp

    def compile(
        self,
        report: str,
        *,
        timestamp: str,
        params: Optional[Mapping[str, Any]] = None,
        subfolder: str | None = None,
        quiet: bool = True,
        options: Sequence[str] = (),
    ) -> CompilationResult:
        sources_dir = self.factory.sources_dir
        report_path = sources_dir / report
        output_dir = self.output_dir_for(report, timestamp, subfolder)

        files_before = snapshot_tree(sources_dir, FILES)
        dirs_before = snapshot_tree(sources_dir, DIRECTORIES)

        with merged_document(report_path, params) as (document, effective):
            logger.info(">>> Compiling report: %s", PurePosixPath(report).with_suffix(""))
            if effective:
                logger.info("      - with parameters: %s", format_params(effective))
            self.renderer.render(
                RenderRequest(
                    input=document,
                    output_dir=output_dir,
                    output_name=report_path.stem,
                    params=effective,
                    quiet=quiet,
                    options=options,
                )
            )

        new_files = diff_snapshots(files_before, snapshot_tree(sources_dir, FILES))

        output_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(report_path, output_dir / report_path.name)
        relocated = self._relocate(report_path, new_files, output_dir)

        new_dirs = diff_snapshots(dirs_before, snapshot_tree(sources_dir, DIRECTORIES))
        removed = self._remove_directories(new_dirs)

        return CompilationResult(
            report=report,
            output_dir=output_dir,
            relocated=relocated,
            removed_dirs=removed,
            params=dict(effective),
        )

    def _relocate(
        self, report_path: Path, entries: Iterable[SnapshotEntry], output_dir: Path
    ) -> List[Path]:
        sources_dir = self.factory.sources_dir
        report_dir = report_path.parent
        relocated: List[Path] = []
        for entry in entries:
            source = sources_dir / entry.path
            try:
                relative = source.relative_to(report_dir)
            except ValueError:
                relative = Path(entry.path)
            destination = output_dir / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(os.fspath(source), os.fspath(destination))
            self.logger.debug("Moved %s -> %s", entry.path, destination)
            relocated.append(destination)
        return relocated

    def _remove_directories(self, entries: Iterable[SnapshotEntry]) -> List[Path]:
        removed: List[Path] = []
        for entry in entries:
            path = self.factory.sources_dir / entry.path
            if not path.exists():
                # parent already removed
                continue
            try:
                shutil.rmtree(path)
            except OSError as exc:
                warn_cleanup(self.logger, path, exc)
                continue
            removed.append(path)
        return removed


def compile_reports(
    reports: SelectorInput = None,
    factory: str | os.PathLike[str] | Factory = ".",
    *,
    ignore_case: bool = False,
    params: Optional[Mapping[str, Any]] = None,
    quiet: bool = True,
    subfolder: str | None = None,
    timestamp: str | None = None,
    engine_options: Sequence[str] = (),
    on_error: str | None = None,
    renderer: IsolatedRenderer | None = None,
) -> List[CompilationResult]:
    """Compile the selected reports of a factory into timestamped output folders.

    ``reports`` may be a regular expression (or several), zero-based indices
    or a boolean mask over :func:`list_reports`. ``params`` override the
    defaults declared in each report header. All reports compiled by one call
    share a single ``timestamp``.
    """
    timestamp = timestamp or format_timestamp()

    resolved = factory if isinstance(factory, Factory) else validate_factory(factory)
    renderer = renderer or IsolatedRenderer(resolved.config.engine)
    renderer.check_available()
    policy = validate_on_error(on_error or resolved.config.on_error)

    available = list_reports(resolved)
    if not available:
        raise EmptyReportSet(f"No reports found in {resolved.sources_dir}")

    selected = select_reports(available, build_selector(reports, ignore_case=ignore_case))

    resolved.outputs_dir.mkdir(parents=True, exist_ok=True)
    capturer = ArtifactCapturer(resolved, renderer)

    results: List[CompilationResult] = []
    failures: List[str] = []
    for report in selected:
        try:
            results.append(
                capturer.compile(
                    report,
                    timestamp=timestamp,
                    params=params,
                    subfolder=subfolder,
                    quiet=quiet,
                    options=engine_options,
                )
            )
        except RenderError as exc:
            if policy == "abort":
                raise
            logger.error("Report %s failed: %s", report, exc)
            failures.append(report)

    if failures:
        raise RenderError(
            f"{len(failures)} of {len(selected)} reports failed: {', '.join(failures)}",
            tuple(failures),
        )

    logger.info("All done!")
    return results


__all__ = [
    "ArtifactCapturer",
    "TIMESTAMP_FORMAT",
    "compile_reports",
    "format_params",
    "format_timestamp",
]
