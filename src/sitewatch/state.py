"""Run state container.

A RunState is built once at the start of a run from the files in the data
directory, threaded through every site check, and written back once at the
end. Nothing under the data directory is modified in between.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitewatch.cipher import URLCipher
    from sitewatch.config import Settings
    from sitewatch.history import HistoryStore
    from sitewatch.models.site import Site
    from sitewatch.status import StatusStore


@dataclass
class RunState:
    """Everything one monitoring run reads and writes."""

    settings: Settings
    sites: list[Site]
    status: StatusStore
    history: HistoryStore

    # None when no site is encrypted, or when no usable key is configured;
    # encrypted sites then fail individually.
    cipher: URLCipher | None = None
