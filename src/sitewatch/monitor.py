"""Monitoring run: check every configured site once and persist the outcome.

A run is a pure mapping from the ordered site list to an ordered list of
outcomes (``CheckSuccess`` or ``CheckFailure``), followed by a single write of
history.json and status.json. A failure on one site (decryption, network,
non-2xx, parsing) becomes an ``error`` status for that site and never stops
the run; only unreadable configuration or state is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from sitewatch.cipher import URLCipher
from sitewatch.detector import Classification, classify
from sitewatch.errors import ConfigError, CryptoError, SiteWatchError, StateError
from sitewatch.fetcher import Fetcher, build_http_client
from sitewatch.history import HistoryStore
from sitewatch.models.site import Site, SitesFile
from sitewatch.models.state import CheckStatus, HistoryEntry, SiteStatus, StatusSnapshot
from sitewatch.normalizer import normalize
from sitewatch.state import RunState
from sitewatch.status import StatusStore
from sitewatch.storage import read_json

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from sitewatch.config import Settings
    from sitewatch.protocols import FetcherProtocol, URLDecrypterProtocol

log = structlog.get_logger()


def utc_now() -> datetime:
    """Current UTC time at the second precision stored in status and history."""
    return datetime.now(UTC).replace(microsecond=0)


@dataclass(frozen=True)
class CheckSuccess:
    site: Site
    checked_at: datetime
    classification: Classification


@dataclass(frozen=True)
class CheckFailure:
    site: Site
    checked_at: datetime
    error: str


SiteOutcome = CheckSuccess | CheckFailure


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_sites(path: Path) -> list[Site]:
    """Read and validate sites.json. Any problem is a ConfigError."""
    if not path.is_file():
        raise ConfigError(f"Site configuration not found: {path}")
    try:
        raw = read_json(path, default=None)
        return SitesFile.model_validate(raw).sites
    except StateError as exc:
        raise ConfigError(exc.message) from exc
    except ValidationError as exc:
        raise ConfigError(f"Invalid site configuration in {path}: {exc}") from exc


def build_cipher(settings: Settings, sites: Sequence[Site]) -> URLCipher | None:
    """Return a cipher if any site needs one and a key is available.

    A missing key is not fatal here: each encrypted site reports the problem
    in its own error status.
    """
    if not any(site.encrypted for site in sites):
        return None
    try:
        return URLCipher.from_settings(settings.crypto)
    except CryptoError as exc:
        log.warning("cipher_unavailable", reason=exc.message)
        return None


def load_run_state(settings: Settings) -> RunState:
    """Load configuration and prior state for one run."""
    sites = load_sites(settings.data.sites_path)
    return RunState(
        settings=settings,
        sites=sites,
        status=StatusStore.load(settings.data.status_path),
        history=HistoryStore.load(
            settings.data.history_path,
            max_entries=settings.history.max_entries,
        ),
        cipher=build_cipher(settings, sites),
    )


# ---------------------------------------------------------------------------
# Checking
# ---------------------------------------------------------------------------


def resolve_url(site: Site, cipher: URLDecrypterProtocol | None) -> str:
    """Return the URL to fetch for ``site``, decrypting it if needed."""
    if not site.encrypted:
        return site.url
    if cipher is None:
        raise CryptoError("Site URL is encrypted but no encryption key is available")
    return cipher.decrypt(site.url)


def check_site(
    site: Site,
    *,
    fetcher: FetcherProtocol,
    cipher: URLDecrypterProtocol | None,
    previous: SiteStatus | None,
    clock: Callable[[], datetime] = utc_now,
) -> SiteOutcome:
    """Run the fetch, normalize, classify pipeline for one site."""
    with structlog.contextvars.bound_contextvars(site_id=site.id):
        try:
            url = resolve_url(site, cipher)
            html = fetcher.fetch(url)
            text = normalize(html, site.selector, site.exclude_selectors)
            checked_at = clock()
            result = classify(
                text,
                prior_hash=previous.hash if previous else None,
                prior_last_change=previous.last_change if previous else None,
                now=checked_at,
            )
        except SiteWatchError as exc:
            log.warning("site_check_failed", **exc.to_dict())
            return CheckFailure(site=site, checked_at=clock(), error=exc.message)
        except Exception as exc:
            log.error("site_check_unexpected_error", exc_info=True)
            return CheckFailure(
                site=site,
                checked_at=clock(),
                error=f"Unexpected error: {exc}" if str(exc) else type(exc).__name__,
            )

        log.info(
            "site_checked",
            status=result.status,
            hash=result.hash,
            change_detected=result.change_detected,
        )
        return CheckSuccess(site=site, checked_at=checked_at, classification=result)


def check_sites(
    sites: Sequence[Site],
    *,
    fetcher: FetcherProtocol,
    cipher: URLDecrypterProtocol | None,
    status: StatusStore,
    clock: Callable[[], datetime] = utc_now,
) -> list[SiteOutcome]:
    """Check ``sites`` in order, one at a time. Never raises for a single site."""
    return [
        check_site(
            site,
            fetcher=fetcher,
            cipher=cipher,
            previous=status.previous(site.id),
            clock=clock,
        )
        for site in sites
    ]


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


def to_site_status(outcome: SiteOutcome) -> SiteStatus:
    site = outcome.site
    if isinstance(outcome, CheckFailure):
        return SiteStatus(
            id=site.id,
            name=site.name,
            url=site.url,
            status=CheckStatus.ERROR,
            last_check=outcome.checked_at,
            last_change=None,
            hash=None,
            error=outcome.error,
            encrypted=site.encrypted,
        )
    result = outcome.classification
    return SiteStatus(
        id=site.id,
        name=site.name,
        url=site.url,
        status=result.status,
        last_check=outcome.checked_at,
        last_change=result.last_change,
        hash=result.hash,
        error=None,
        encrypted=site.encrypted,
    )


def to_history_entry(outcome: CheckSuccess) -> HistoryEntry:
    result = outcome.classification
    return HistoryEntry(
        timestamp=outcome.checked_at,
        status=result.status,
        hash=result.hash,
        change_detected=result.change_detected,
    )


def apply_outcomes(state: RunState, outcomes: Sequence[SiteOutcome]) -> StatusSnapshot:
    """Fold outcomes into the in-memory stores. Failures add no history."""
    for outcome in outcomes:
        if isinstance(outcome, CheckSuccess):
            state.history.append(outcome.site.id, to_history_entry(outcome))
    return state.status.replace([to_site_status(outcome) for outcome in outcomes])


def save_run_state(state: RunState) -> None:
    data = state.settings.data
    state.history.save(data.history_path)
    state.status.save(data.status_path)


def run(
    settings: Settings,
    *,
    fetcher: FetcherProtocol | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> StatusSnapshot:
    """Check every configured site once and persist status and history.

    Raises ConfigError or StateError before anything is fetched when the
    inputs cannot be loaded; persisted files are then left untouched.
    """
    state = load_run_state(settings)
    log.info("run_started", sites=len(state.sites), data_dir=settings.data.dir)

    client = None
    if fetcher is None:
        client = build_http_client(settings.fetcher)
        fetcher = Fetcher(client)

    try:
        outcomes = check_sites(
            state.sites,
            fetcher=fetcher,
            cipher=state.cipher,
            status=state.status,
            clock=clock,
        )
    finally:
        if client is not None:
            client.close()

    snapshot = apply_outcomes(state, outcomes)
    save_run_state(state)

    log.info(
        "run_completed",
        checked=len(outcomes),
        updated=sum(1 for s in snapshot.sites if s.status == CheckStatus.UPDATED),
        errors=sum(1 for s in snapshot.sites if s.status == CheckStatus.ERROR),
        last_updated=snapshot.last_updated.isoformat() if snapshot.last_updated else None,
    )
    return snapshot
