"""Report selection by pattern, index or boolean mask."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from .errors import SelectionError


@dataclass(frozen=True)
class PatternSelector:
    """Regular expressions searched against report paths."""

    patterns: Tuple[str, ...]
    ignore_case: bool = False

    def resolve(self, reports: Sequence[str]) -> List[str]:
        flags = re.IGNORECASE if self.ignore_case else 0
        selected: List[str] = []
        seen = set()
        for pattern in self.patterns:
            try:
                regex = re.compile(pattern, flags)
            except re.error as exc:
                raise SelectionError(f"Invalid report pattern '{pattern}': {exc}") from exc
            for report in reports:
                if report not in seen and regex.search(report):
                    selected.append(report)
                    seen.add(report)
        if not selected:
            raise SelectionError("Unable to find matching reports to compile")
        return selected


@dataclass(frozen=True)
class IndexSelector:
    """Zero-based positions into the discovered report list."""

    indices: Tuple[int, ...]

    def resolve(self, reports: Sequence[str]) -> List[str]:
        count = len(reports)
        selected: List[str] = []
        for index in self.indices:
            if not -count <= index < count:
                raise SelectionError(
                    f"Unable to match reports with the given index {index} ({count} reports found)"
                )
            report = reports[index]
            if report not in selected:
                selected.append(report)
        if not selected:
            raise SelectionError("Unable to match reports with the given index")
        return selected


@dataclass(frozen=True)
class MaskSelector:
    """Boolean flags, one per discovered report."""

    mask: Tuple[bool, ...]

    def resolve(self, reports: Sequence[str]) -> List[str]:
        if len(self.mask) != len(reports):
            raise SelectionError(
                f"Report mask has {len(self.mask)} entries but {len(reports)} reports were found"
            )
        selected = [report for report, keep in zip(reports, self.mask) if keep]
        if not selected:
            raise SelectionError("Report mask does not select any report")
        return selected


Selector = Union[PatternSelector, IndexSelector, MaskSelector]

SelectorInput = Union[Selector, str, int, Iterable[Union[str, int, bool]], None]


def build_selector(reports: SelectorInput, *, ignore_case: bool = False) -> Selector | None:
    """Coerce user input into one selector variant.

    Strings are patterns, integers are indices and booleans form a mask.
    Mixing kinds in one sequence is rejected.
    """
    if reports is None:
        return None
    if isinstance(reports, (PatternSelector, IndexSelector, MaskSelector)):
        return reports
    if isinstance(reports, str):
        return PatternSelector((reports,), ignore_case=ignore_case)
    if isinstance(reports, bool):
        return MaskSelector((reports,))
    if isinstance(reports, int):
        return IndexSelector((reports,))

    items = list(reports)
    if not items:
        raise SelectionError("Report selector is empty")
    if all(isinstance(item, bool) for item in items):
        return MaskSelector(tuple(items))  # type: ignore[arg-type]
    if all(isinstance(item, int) and not isinstance(item, bool) for item in items):
        return IndexSelector(tuple(items))  # type: ignore[arg-type]
    if all(isinstance(item, str) for item in items):
        return PatternSelector(tuple(items), ignore_case=ignore_case)  # type: ignore[arg-type]
    raise SelectionError("Report selector must contain only patterns, only indices or only booleans")


def select_reports(reports: Sequence[str], selector: Selector | None) -> List[str]:
    """Resolve ``selector`` against the discovered reports."""
    if selector is None:
        return list(reports)
    return selector.resolve(reports)


__all__ = [
    "IndexSelector",
    "MaskSelector",
    "PatternSelector",
    "Selector",
    "build_selector",
    "select_reports",
]
