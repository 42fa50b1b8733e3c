"""Shared test fixtures for the sitewatch test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog
from pydantic import SecretStr

from sitewatch.config import CryptoSettings, DataSettings, Settings
from sitewatch.models.site import Site

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

TEST_SECRET = "correct horse battery staple"


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo CLI logging configuration so later tests never write to a closed stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def sample_sites() -> list[Site]:
    """Minimal site configuration covering selector and exclusion handling."""
    return [
        Site(
            id="news",
            name="News",
            url="https://news.example.com/",
            selector="main",
            exclude_selectors=(".ad",),
            description="Front page",
        ),
        Site(
            id="blog",
            name="Blog",
            url="https://blog.example.com/",
            selector="article",
        ),
    ]


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at an isolated data directory with a known secret."""
    return Settings(
        data=DataSettings(dir=str(tmp_path)),
        crypto=CryptoSettings(secret=SecretStr(TEST_SECRET)),
    )
