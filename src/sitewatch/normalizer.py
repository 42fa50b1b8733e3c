"""Content normalizer.

Turns fetched markup into the canonical text that gets fingerprinted. Visible
text is extracted with BeautifulSoup, optionally restricted to a CSS selector
with excluded sub-trees removed, then stripped of volatile fragments (dates,
clock times, view/comment/like counters) so that they cannot flip a page to
``updated`` on their own.

The result keeps markup characters escaped (``&lt;``, ``&amp;``), so feeding it
back through ``normalize`` reads it as text and returns it unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from html import escape

from bs4 import BeautifulSoup

_INVISIBLE_TAGS = ["script", "style", "noscript", "template"]

_WHITESPACE_RE = re.compile(r"\s+")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIME_RE = re.compile(r"[0-9]{1,2}:[0-9]{2}(?::[0-9]{2})?")
_COUNTER_RE = re.compile(r"\b[0-9]+\s*(?:views?|comments?|likes?)\b", re.IGNORECASE)


def extract_text(
    html: str,
    selector: str | None = None,
    exclude_selectors: Sequence[str] = (),
) -> str:
    """Return the raw visible text of ``html``.

    With a selector, only text inside matching elements is kept; a selector
    that matches nothing yields an empty string.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_INVISIBLE_TAGS):
        tag.decompose()

    roots = soup.select(selector) if selector else [soup]

    for root in roots:
        for exclude in exclude_selectors:
            for tag in root.select(exclude):
                tag.decompose()

    return " ".join(root.get_text(" ") for root in roots)


def _canonicalize_once(text: str) -> str:
    text = _WHITESPACE_RE.sub(" ", text)
    text = _DATE_RE.sub("", text)
    text = _TIME_RE.sub("", text)
    text = _COUNTER_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def canonicalize(text: str) -> str:
    """Collapse whitespace and remove volatile fragments from ``text``.

    A removal can splice its neighbours into a new match (``"20242024-01-01-01-01"``
    only vanishes after two passes), so passes repeat until the text
    stops changing. This makes ``canonicalize`` idempotent.
    """
    while True:
        result = _canonicalize_once(text)
        if result == text:
            return result
        text = result


def normalize(
    html: str,
    selector: str | None = None,
    exclude_selectors: Sequence[str] = (),
) -> str:
    """Extract and canonicalize the fingerprintable text of a page."""
    text = extract_text(html, selector, exclude_selectors)
    return canonicalize(escape(text, quote=False))
