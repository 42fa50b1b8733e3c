"""Change detection: content fingerprints and status classification.

The fingerprint is the MD5 hex digest of the normalized text. It identifies
content, it is not a security boundary.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sitewatch.models.state import CheckStatus

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True)
class Classification:
    """Outcome of comparing a fresh fingerprint against the previous one."""

    status: CheckStatus
    hash: str
    change_detected: bool
    last_change: datetime | None


def fingerprint(text: str) -> str:
    """Return the hex digest identifying ``text``."""
    return hashlib.md5(text.encode("utf-8"), usedforsecurity=False).hexdigest()


def classify(
    text: str,
    prior_hash: str | None,
    prior_last_change: datetime | None,
    now: datetime,
) -> Classification:
    """Classify normalized ``text`` against the site's previous state.

    With no prior hash the check only records a baseline: the first
    observation of a site is ``unchanged``, never ``updated``.
    """
    new_hash = fingerprint(text)

    if prior_hash is None:
        return Classification(
            status=CheckStatus.UNCHANGED,
            hash=new_hash,
            change_detected=False,
            last_change=None,
        )

    if new_hash != prior_hash:
        return Classification(
            status=CheckStatus.UPDATED,
            hash=new_hash,
            change_detected=True,
            last_change=now,
        )

    return Classification(
        status=CheckStatus.UNCHANGED,
        hash=new_hash,
        change_detected=False,
        last_change=prior_last_change,
    )
