"""Protocol interfaces for swappable components.

The run loop references these protocols, not the concrete implementations,
so tests can drive it with in-memory fakes instead of mocked HTTP.
"""

from __future__ import annotations

from typing import Protocol


class FetcherProtocol(Protocol):
    """Interface for the page fetcher."""

    def fetch(self, url: str) -> str: ...


class URLDecrypterProtocol(Protocol):
    """Interface for turning a stored encrypted URL back into plaintext."""

    def decrypt(self, data: str) -> str: ...
