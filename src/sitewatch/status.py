"""Latest-state snapshot of every site (status.json)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from sitewatch.errors import StateError
from sitewatch.models.state import SiteStatus, StatusSnapshot
from sitewatch.storage import read_json, write_json_atomic

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from pathlib import Path

log = structlog.get_logger()


def latest_change(statuses: Iterable[SiteStatus]) -> datetime | None:
    """Return the most recent ``last_change`` across ``statuses``, or None."""
    changes = [s.last_change for s in statuses if s.last_change is not None]
    return max(changes) if changes else None


class StatusStore:
    """Holds the status snapshot of one run.

    The previous snapshot is only read during the run; ``replace`` swaps in the
    freshly computed list as a whole once every site has been checked.
    """

    def __init__(self, snapshot: StatusSnapshot | None = None) -> None:
        self._snapshot = snapshot or StatusSnapshot()
        self._by_id = {s.id: s for s in self._snapshot.sites}

    @classmethod
    def load(cls, path: Path) -> StatusStore:
        """Read status.json. A missing file is an empty snapshot.

        Site records that fail validation are dropped with a warning, which
        makes the affected site cold-start on its next check.
        """
        raw = read_json(path, default={})
        if not isinstance(raw, dict):
            raise StateError(f"{path} must contain a JSON object")
        raw_sites = raw.get("sites", [])
        if not isinstance(raw_sites, list):
            raise StateError(f"{path}: 'sites' must be a list")

        sites: list[SiteStatus] = []
        for index, raw_site in enumerate(raw_sites):
            try:
                sites.append(SiteStatus.model_validate(raw_site))
            except ValidationError as exc:
                log.warning("status_record_quarantined", index=index, errors=exc.error_count())

        return cls(StatusSnapshot(last_updated=latest_change(sites), sites=sites))

    @property
    def snapshot(self) -> StatusSnapshot:
        return self._snapshot

    def previous(self, site_id: str) -> SiteStatus | None:
        """Return the last recorded status of ``site_id``, if any."""
        return self._by_id.get(site_id)

    def replace(self, statuses: list[SiteStatus]) -> StatusSnapshot:
        """Replace the whole snapshot and recompute ``last_updated``."""
        self._snapshot = StatusSnapshot(
            last_updated=latest_change(statuses),
            sites=list(statuses),
        )
        self._by_id = {s.id: s for s in self._snapshot.sites}
        return self._snapshot

    def to_json(self) -> dict:
        return self._snapshot.model_dump(mode="json")

    def save(self, path: Path) -> None:
        write_json_atomic(path, self.to_json())
