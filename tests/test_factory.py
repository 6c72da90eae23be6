"""Tests for factory location, validation and scaffolding."""

from __future__ import annotations

from pathlib import Path

import pytest

from reportfactory.config import CONFIG_FILENAME, load_config
from reportfactory.errors import FactoryNotFound
from reportfactory.factory import (
    list_outputs,
    list_reports,
    locate_factory,
    new_factory,
    validate_factory,
)


def test_locate_factory_from_nested_path(factory_builder) -> None:
    nested = factory_builder.sources / "deep" / "er"
    nested.mkdir(parents=True)

    assert locate_factory(nested) == factory_builder.root.resolve()


def test_locate_factory_from_file_path(factory_builder) -> None:
    report = factory_builder.report("r.qmd")
    assert locate_factory(report) == factory_builder.root.resolve()


def test_locate_factory_without_config_uses_folder_layout(tmp_path: Path) -> None:
    (tmp_path / "report_sources").mkdir()
    (tmp_path / "outputs").mkdir()

    assert locate_factory(tmp_path / "report_sources") == tmp_path.resolve()


def test_locate_factory_fails_outside_a_factory(tmp_path: Path) -> None:
    with pytest.raises(FactoryNotFound):
        locate_factory(tmp_path)
    with pytest.raises(FactoryNotFound):
        locate_factory(tmp_path / "missing")


def test_validate_factory_requires_sources_folder(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("report_sources: reports\n", encoding="utf-8")

    with pytest.raises(FactoryNotFound):
        validate_factory(tmp_path)


def test_validate_factory_honours_custom_folder_names(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("report_sources: src\noutputs: out\n", encoding="utf-8")
    (tmp_path / "src").mkdir()

    factory = validate_factory(tmp_path)

    assert factory.root == tmp_path.resolve()
    assert factory.sources_dir == tmp_path.resolve() / "src"
    assert factory.outputs_dir == tmp_path.resolve() / "out"


def test_list_reports_in_lexical_order(factory_builder) -> None:
    factory_builder.report("b.qmd")
    factory_builder.report("a/z.Rmd")
    factory_builder.report("a.qmd")
    factory_builder.write(
        {
            "report_sources/notes.txt": "ignored",
            "report_sources/helper.py": "import os\n",
            "report_sources/_reportfactory_tmp_b.qmd": "stale",
        }
    )

    assert list_reports(factory_builder.root) == ["a.qmd", "a/z.Rmd", "b.qmd"]


def test_list_reports_uses_configured_extensions(factory_builder) -> None:
    factory_builder.write_config(report_extensions=["md"])
    factory_builder.report("one.md")
    factory_builder.report("two.qmd")

    assert list_reports(factory_builder.root) == ["one.md"]


def test_list_outputs(factory_builder) -> None:
    factory_builder.write({"outputs/r/ts/r.html": "<html/>", "outputs/r/ts/r.qmd": "x"})

    assert list_outputs(factory_builder.root) == ["r/ts/r.html", "r/ts/r.qmd"]


def test_new_factory_creates_layout(tmp_path: Path) -> None:
    root = new_factory(tmp_path / "my_factory")

    assert (root / "report_sources" / "example_report.qmd").exists()
    assert (root / "outputs").is_dir()
    assert (root / "data" / "raw").is_dir()
    assert (root / "data" / "clean").is_dir()
    assert (root / "scripts").is_dir()
    assert (root / "README.md").exists()
    assert load_config(root).name == "my_factory"
    assert validate_factory(root).root == root
    assert list_reports(root) == ["example_report.qmd"]


def test_new_factory_respects_options(tmp_path: Path) -> None:
    root = new_factory(
        tmp_path / "bare",
        name="bare",
        report_sources="src",
        outputs="out",
        create_readme=False,
        create_example_report=False,
        create_data_folders=False,
        create_scripts_folder=False,
    )

    assert sorted(p.name for p in root.iterdir()) == [".gitignore", CONFIG_FILENAME, "out", "src"]
    assert list_reports(root) == []


def test_new_factory_refuses_non_empty_directory(tmp_path: Path) -> None:
    (tmp_path / "existing.txt").write_text("x", encoding="utf-8")

    with pytest.raises(FileExistsError):
        new_factory(tmp_path)
