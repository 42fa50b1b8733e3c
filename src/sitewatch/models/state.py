from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field


def _as_utc(value: datetime) -> datetime:
    # Older files may carry naive timestamps; they were always written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CheckStatus(StrEnum):
    """Classification of a site's latest check. Values are read by the dashboard."""

    UNCHANGED = "unchanged"
    UPDATED = "updated"
    ERROR = "error"


class SiteStatus(BaseModel):
    """Latest known state of one site, as stored in status.json."""

    id: str
    name: str
    url: str  # As displayed: ciphertext for encrypted sites, never the plaintext
    status: CheckStatus
    last_check: UtcDatetime
    last_change: UtcDatetime | None = None
    hash: str | None = None
    error: str | None = None
    encrypted: bool = False


class HistoryEntry(BaseModel):
    """One completed check, as stored in history.json."""

    timestamp: UtcDatetime
    status: CheckStatus
    hash: str
    change_detected: bool


class StatusSnapshot(BaseModel):
    """The whole of status.json."""

    last_updated: UtcDatetime | None = None
    sites: list[SiteStatus] = Field(default_factory=list)
