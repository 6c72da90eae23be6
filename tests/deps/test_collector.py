"""Tests for dependency aggregation across a factory."""

from __future__ import annotations

from pathlib import Path
from typing import Set

from reportfactory.deps import DependencyCollector, DependencyMatcher, list_deps


def test_list_deps_collects_reports_and_scripts(factory_builder) -> None:
    factory_builder.write(
        {
            "report_sources/weekly.qmd": """
                ---
                title: Weekly
                params:
                  region: north
                ---

                Mentions import seaborn in prose only.

                ```{python}
                import pandas as pd
                from matplotlib import pyplot
                ```
                """,
            "report_sources/helpers.py": "import numpy\n",
            "scripts/clean.py": "import json\nfrom scipy import stats\n",
            "outputs/weekly/ts/weekly.qmd": "```{python}\nimport from_outputs\n```\n",
            "data/raw/notes.txt": "import not_scanned\n",
        }
    )

    assert list_deps(factory_builder.root) == ["json", "matplotlib", "numpy", "pandas", "scipy"]


def test_list_deps_is_empty_for_reports_without_code(factory_builder) -> None:
    factory_builder.report("plain.qmd", "No code at all.\n")
    factory_builder.report("header_only.qmd", "Words.\n", params={"a": 1})

    assert list_deps(factory_builder.root) == []


def test_list_deps_missing_only_reports_uninstalled(factory_builder) -> None:
    factory_builder.write(
        {"scripts/run.py": "import json\nimport reportfactory_surely_missing_pkg\n"}
    )

    assert list_deps(factory_builder.root, missing=True) == ["reportfactory_surely_missing_pkg"]


def test_list_deps_respects_gitignore(factory_builder) -> None:
    factory_builder.write(
        {
            ".gitignore": "scratch/\n",
            "scratch/tmp.py": "import ignored_pkg\n",
            "scripts/run.py": "import kept_pkg\n",
        }
    )

    assert list_deps(factory_builder.root) == ["kept_pkg"]


class ShoutMatcher(DependencyMatcher):
    suffixes = (".txt",)

    def extract(self, text: str) -> Set[str]:
        return {word for word in text.split() if word.isupper()}


def test_collector_uses_supplied_matchers(tmp_path: Path) -> None:
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    ignored = tmp_path / "c.py"
    first.write_text("uses ALPHA and BETA", encoding="utf-8")
    second.write_text("uses BETA", encoding="utf-8")
    ignored.write_text("import gamma\n", encoding="utf-8")

    collector = DependencyCollector([ShoutMatcher()])

    assert collector.collect([first, second, ignored]) == {"ALPHA", "BETA"}
    assert collector.matcher_for(ignored) is None
