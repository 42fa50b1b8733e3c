"""Bounded per-site history of completed checks (history.json).

Only successful checks are recorded; a failed fetch leaves the history of that
site untouched. Each site keeps at most ``max_entries`` entries, oldest
evicted first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from sitewatch.errors import StateError
from sitewatch.models.state import HistoryEntry
from sitewatch.storage import read_json, write_json_atomic

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()

DEFAULT_MAX_ENTRIES = 100


class HistoryStore:
    """In-memory history for one run, loaded once and saved once."""

    def __init__(
        self,
        entries: dict[str, list[HistoryEntry]] | None = None,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._max_entries = max_entries
        self._entries: dict[str, list[HistoryEntry]] = {
            site_id: site_entries[-max_entries:]
            for site_id, site_entries in (entries or {}).items()
        }

    @classmethod
    def load(cls, path: Path, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> HistoryStore:
        """Read history.json. A missing file is an empty history.

        Entries that fail validation are dropped with a warning; a file that is
        not a JSON object keyed by site ID raises StateError.
        """
        raw = read_json(path, default={})
        if not isinstance(raw, dict):
            raise StateError(f"{path} must contain a JSON object keyed by site ID")

        entries: dict[str, list[HistoryEntry]] = {}
        for site_id, raw_entries in raw.items():
            if not isinstance(raw_entries, list):
                log.warning("history_site_quarantined", site_id=site_id, reason="not_a_list")
                continue
            valid: list[HistoryEntry] = []
            for index, raw_entry in enumerate(raw_entries):
                try:
                    valid.append(HistoryEntry.model_validate(raw_entry))
                except ValidationError as exc:
                    log.warning(
                        "history_entry_quarantined",
                        site_id=site_id,
                        index=index,
                        errors=exc.error_count(),
                    )
            entries[site_id] = valid

        return cls(entries, max_entries=max_entries)

    def append(self, site_id: str, entry: HistoryEntry) -> None:
        """Record a completed check, then drop the oldest entries beyond the cap."""
        site_entries = self._entries.setdefault(site_id, [])
        site_entries.append(entry)
        if len(site_entries) > self._max_entries:
            del site_entries[: len(site_entries) - self._max_entries]

    def entries(self, site_id: str) -> list[HistoryEntry]:
        """Return the history of ``site_id``, oldest first."""
        return list(self._entries.get(site_id, []))

    def site_ids(self) -> list[str]:
        return list(self._entries)

    def to_json(self) -> dict[str, list[dict]]:
        return {
            site_id: [entry.model_dump(mode="json") for entry in site_entries]
            for site_id, site_entries in self._entries.items()
        }

    def save(self, path: Path) -> None:
        write_json_atomic(path, self.to_json())
