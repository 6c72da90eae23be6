"""Tests for ArtifactCapturer with an in-process renderer double."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from reportfactory.errors import RenderError
from reportfactory.factory import validate_factory
from reportfactory.pipeline import ArtifactCapturer
from reportfactory.render import RenderRequest


class StubRenderer:
    """Writes files as a render side effect without spawning a process."""

    def __init__(self, effect: Callable[[RenderRequest], None]) -> None:
        self.effect = effect
        self.requests: list[RenderRequest] = []

    def check_available(self) -> None:
        return None

    def render(self, request: RenderRequest) -> None:
        self.requests.append(request)
        self.effect(request)


def _capturer(factory_builder, effect) -> tuple[ArtifactCapturer, StubRenderer]:  # type: ignore[no-untyped-def]
    renderer = StubRenderer(effect)
    return ArtifactCapturer(validate_factory(factory_builder.root), renderer), renderer  # type: ignore[arg-type]


def test_capture_removes_new_scaffolding_directories(factory_builder) -> None:
    factory_builder.report("r.qmd")

    def effect(request: RenderRequest) -> None:
        cache = request.input.parent / "r_cache" / "html"
        cache.mkdir(parents=True)
        (request.input.parent / "r_files" / "empty").mkdir(parents=True)
        (cache / "chunk.rdb").write_text("cache", encoding="utf-8")

    capturer, _ = _capturer(factory_builder, effect)
    result = capturer.compile("r.qmd", timestamp="ts")

    assert factory_builder.source_entries() == ["r.qmd"]
    assert (result.output_dir / "r_cache" / "html" / "chunk.rdb").exists()
    assert sorted(p.name for p in result.removed_dirs) == ["r_cache", "r_files"]


def test_capture_keeps_preexisting_files_and_directories(factory_builder) -> None:
    factory_builder.report("r.qmd")
    factory_builder.write({"report_sources/data/input.csv": "a\n1\n"})

    def effect(request: RenderRequest) -> None:
        (request.input.parent / "data" / "derived.csv").write_text("b\n2\n", encoding="utf-8")

    capturer, _ = _capturer(factory_builder, effect)
    result = capturer.compile("r.qmd", timestamp="ts")

    assert factory_builder.source_entries() == ["data", "data/input.csv", "r.qmd"]
    assert result.relocated == [result.output_dir / "data" / "derived.csv"]
    assert result.removed_dirs == []


def test_capture_maps_files_outside_report_folder_from_sources_root(factory_builder) -> None:
    factory_builder.report("group/r.qmd")

    def effect(request: RenderRequest) -> None:
        (request.input.parent.parent / "stray.txt").write_text("x", encoding="utf-8")

    capturer, _ = _capturer(factory_builder, effect)
    result = capturer.compile("group/r.qmd", timestamp="ts")

    assert result.output_dir == factory_builder.outputs / "group" / "r" / "ts"
    assert result.relocated == [result.output_dir / "stray.txt"]


def test_capture_passes_render_request(factory_builder) -> None:
    factory_builder.report("r.qmd", params={"a": 2, "b": 3})

    capturer, renderer = _capturer(factory_builder, lambda request: None)
    capturer.compile("r.qmd", timestamp="ts", params={"a": 1}, subfolder="s", quiet=False, options=["-x"])

    request = renderer.requests[0]
    assert request.input.name == "_reportfactory_tmp_r.qmd"
    assert request.output_dir == factory_builder.outputs / "r" / "s" / "ts"
    assert request.output_name == "r"
    assert request.params == {"a": 1, "b": 3}
    assert request.quiet is False
    assert list(request.options) == ["-x"]


def test_capture_propagates_render_error_without_relocating(factory_builder) -> None:
    factory_builder.report("r.qmd")

    def effect(request: RenderRequest) -> None:
        (request.input.parent / "partial.txt").write_text("x", encoding="utf-8")
        raise RenderError("engine crashed", ("r",))

    capturer, _ = _capturer(factory_builder, effect)

    with pytest.raises(RenderError):
        capturer.compile("r.qmd", timestamp="ts")

    assert not (factory_builder.outputs / "r").exists()
    assert factory_builder.source_entries() == ["partial.txt", "r.qmd"]


def test_output_dir_for_strips_extension(factory_builder) -> None:
    capturer, _ = _capturer(factory_builder, lambda request: None)

    assert capturer.output_dir_for("a/b.report.qmd", "ts") == factory_builder.outputs / "a" / "b.report" / "ts"
    assert capturer.output_dir_for("c.qmd", "ts", "sub") == factory_builder.outputs / "c" / "sub" / "ts"
