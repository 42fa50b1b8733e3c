"""Integration test fixtures.

Runs go through the real file layout in a temporary data directory, with HTTP
served by respx.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sitewatch.config import Settings


@pytest.fixture()
def data_dir(settings: Settings) -> Path:
    return settings.data.sites_path.parent


@pytest.fixture()
def write_sites(data_dir: Path) -> Callable[[list[dict]], None]:
    """Return a function that writes a sites.json into the data directory."""

    def _write(sites: list[dict]) -> None:
        data_dir.mkdir(parents=True, exist_ok=True)
        (data_dir / "sites.json").write_text(json.dumps({"sites": sites}), encoding="utf-8")

    return _write


@pytest.fixture()
def clock_at() -> Callable[[int], Callable[[], datetime]]:
    """Return a factory of fixed clocks, one per simulated run (hours after a base time)."""
    base = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)

    def factory(hours: int) -> Callable[[], datetime]:
        return lambda: base + timedelta(hours=hours)

    return factory
