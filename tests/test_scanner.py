"""Tests for reportfactory.scanner."""

from __future__ import annotations

from pathlib import Path

from reportfactory.scanner import IgnoreRules, iter_tracked_files


def _write(path: Path, content: str = "x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_iter_tracked_files_skips_excluded_and_ignored(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.log\nbuild/\n!keep.log\n")
    _write(tmp_path / "scripts" / "clean.py")
    _write(tmp_path / "notes.log")
    _write(tmp_path / "keep.log")
    _write(tmp_path / "build" / "out.py")
    _write(tmp_path / ".venv" / "lib.py")
    _write(tmp_path / "renv" / "activate.R")
    _write(tmp_path / "__pycache__" / "x.pyc")
    _write(tmp_path / "outputs" / "r" / "copy.py")
    _write(tmp_path / "sub" / "outputs" / "kept.py")

    files = {
        path.relative_to(tmp_path).as_posix()
        for path in iter_tracked_files(tmp_path, exclude=["outputs"])
    }

    assert files == {".gitignore", "scripts/clean.py", "keep.log", "sub/outputs/kept.py"}


def test_ignore_rules_match_segments_and_anchors() -> None:
    rules = IgnoreRules(["*.tmp", "/data/raw/", "docs/*.md"])

    assert rules.ignores("a/b/c.tmp", False)
    assert rules.ignores("data/raw", True)
    assert not rules.ignores("data/raw", False)
    assert not rules.ignores("other/data/raw", True)
    assert rules.ignores("docs/notes.md", False)
    assert not rules.ignores("other/docs/notes.md", False)
    assert not rules.ignores("a/b/c.py", False)


def test_ignore_rules_support_double_star_and_negation() -> None:
    rules = IgnoreRules(["# comment", "**/cache", "*.csv", "!data/keep.csv"])

    assert rules.ignores("cache", True)
    assert rules.ignores("deep/nested/cache", True)
    assert rules.ignores("data/drop.csv", False)
    assert not rules.ignores("data/keep.csv", False)
