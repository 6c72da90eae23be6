"""YAML header reading and parameter merging for literate documents."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

import yaml

from .errors import ConfigError
from .factory import TMP_PREFIX
from .logging import get_logger, warn_cleanup
from .models import HeaderDocument

_DELIMITER = "---"
_CLOSERS = {"---", "..."}

logger = get_logger("header")


@dataclass(frozen=True)
class TaggedValue:
    """A header value carrying a local YAML tag, such as ``!r Sys.Date()``.

    The value is evaluated by the rendering engine, so it is kept verbatim
    and written back with its tag when a merged header is produced.
    """

    tag: str
    value: Any

    def __str__(self) -> str:
        return f"{self.tag} {self.value}"


class _HeaderLoader(yaml.SafeLoader):
    pass


class _HeaderDumper(yaml.SafeDumper):
    pass


def _construct_tagged(loader: yaml.SafeLoader, suffix: str, node: yaml.Node) -> TaggedValue:
    tag = f"!{suffix}"
    if isinstance(node, yaml.MappingNode):
        return TaggedValue(tag, loader.construct_mapping(node, deep=True))
    if isinstance(node, yaml.SequenceNode):
        return TaggedValue(tag, loader.construct_sequence(node, deep=True))
    return TaggedValue(tag, loader.construct_scalar(node))


def _represent_tagged(dumper: yaml.SafeDumper, data: TaggedValue) -> yaml.Node:
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    return dumper.represent_scalar(data.tag, str(data.value))


_HeaderLoader.add_multi_constructor("!", _construct_tagged)
_HeaderDumper.add_representer(TaggedValue, _represent_tagged)


def split_header(text: str) -> HeaderDocument:
    """Split ``text`` into its YAML front matter and body."""
    lines = text.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or lines[0].strip() != _DELIMITER:
        return HeaderDocument(header={}, body=text)

    for index in range(1, len(lines)):
        if lines[index].strip() in _CLOSERS:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return HeaderDocument(header=_parse_header(raw), body=body)

    # an opening delimiter without a closer is a horizontal rule, not a header
    return HeaderDocument(header={}, body=text)


def read_header(path: Path) -> HeaderDocument:
    """Read and split the document at ``path``."""
    try:
        return split_header(Path(path).read_text(encoding="utf-8"))
    except ConfigError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def merge_params(
    params: Mapping[str, Any], header_params: Mapping[str, Any]
) -> Dict[str, Any]:
    """Combine caller parameters with header defaults; caller values win."""
    merged = dict(params)
    for name, value in header_params.items():
        if name not in merged:
            merged[name] = value
    return merged


def render_document(document: HeaderDocument, header: Mapping[str, Any]) -> str:
    """Serialize ``header`` in front of the document body."""
    dumped = yaml.dump(dict(header), Dumper=_HeaderDumper, sort_keys=False, allow_unicode=True)
    return f"{_DELIMITER}\n{dumped}{_DELIMITER}\n{document.body}"


def temporary_path(report: Path) -> Path:
    return report.parent / f"{TMP_PREFIX}{report.name}"


@contextmanager
def merged_document(
    report: Path, params: Optional[Mapping[str, Any]]
) -> Iterator[tuple[Path, Dict[str, Any]]]:
    """Yield the document to render and the parameters in effect.

    Without caller parameters the report itself is yielded. Otherwise a copy
    with the merged header is written next to the report and removed on exit,
    whether or not the body raised.
    """
    document = read_header(report)
    if params is None:
        yield report, document.params
        return

    merged = merge_params(params, document.params)
    header = dict(document.header)
    header["params"] = merged
    tmp_path = temporary_path(report)
    tmp_path.write_text(render_document(document, header), encoding="utf-8")
    try:
        yield tmp_path, merged
    finally:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as exc:
            warn_cleanup(logger, tmp_path, exc)


def _parse_header(raw: str) -> Dict[str, Any]:
    if not raw.strip():
        return {}
    try:
        loaded = yaml.load(raw, Loader=_HeaderLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML header: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError("YAML header must be a mapping")
    return loaded


__all__ = [
    "TaggedValue",
    "merge_params",
    "merged_document",
    "read_header",
    "render_document",
    "split_header",
    "temporary_path",
]
