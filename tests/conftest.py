"""Shared fixtures for modelhost tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def write_data(tmp_path: Path):
    """Write a data file and return its path."""

    def _write(text: str, name: str = "data.txt") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


GROWTH_DATA = """\
LATA 2020 2021 2022
production 1000
consumption 500
savings 100
growthRatesProduction 1 2
growthRatesConsumption 1 2
growthRatesSavings 1 2
"""


@pytest.fixture
def growth_data(write_data) -> Path:
    """A three-period data file where every quantity doubles each year."""
    return write_data(GROWTH_DATA)
