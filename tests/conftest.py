from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.factory_builder import FactoryBuilder


@pytest.fixture
def factory_builder(tmp_path: Path) -> FactoryBuilder:
    """Provide a factory wired to the fake rendering engine."""
    return FactoryBuilder(tmp_path)
