"""HTTP page fetcher.

One blocking GET per site per run, no retries. The Fetcher receives an
``httpx.Client`` via constructor injection; the run owns the client lifecycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from sitewatch.errors import FetchError

if TYPE_CHECKING:
    from sitewatch.config import FetcherSettings

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings) -> httpx.Client:
    """Create the client shared by every fetch of one run."""
    return httpx.Client(
        # A redirect is reported as a non-2xx failure rather than followed.
        follow_redirects=False,
        timeout=httpx.Timeout(
            settings.read_timeout_seconds,
            connect=settings.connect_timeout_seconds,
        ),
        headers={"User-Agent": settings.user_agent},
    )


class Fetcher:
    """Fetches raw page markup, raising FetchError on anything but a 2xx."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def fetch(self, url: str) -> str:
        """Return the response body of ``url``.

        Raises FetchError carrying ``status_code`` and ``reason`` for non-2xx
        responses, and chained to the transport exception for connection
        failures and timeouts.
        """
        try:
            response = self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"Network error: {exc}") from exc

        if not response.is_success:
            reason = response.reason_phrase
            raise FetchError(
                f"HTTP {response.status_code}: {reason}",
                status_code=response.status_code,
                reason=reason,
            )

        log.debug(
            "fetch_complete",
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response.text
