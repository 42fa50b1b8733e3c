from __future__ import annotations

from sitewatch.models.site import Site, SitesFile
from sitewatch.models.state import (
    CheckStatus,
    HistoryEntry,
    SiteStatus,
    StatusSnapshot,
)

__all__ = [
    # config
    "Site",
    "SitesFile",
    # persisted state
    "CheckStatus",
    "SiteStatus",
    "HistoryEntry",
    "StatusSnapshot",
]
