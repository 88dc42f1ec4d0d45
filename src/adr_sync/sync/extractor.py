"""Status extraction from ADR card tables.

ADR pages start with a hand-edited "card table" in Confluence storage
format. The Status row looks like::

    <td><p><strong><span style="...">Status</span></strong></p></td>
    <td><p>Accepted</p></td>

Styling drifts between pages, so extraction is an ordered list of
strategies tried from most to least precise:

1. ``primary``  -- the value cell's first paragraph is plain text.
2. ``empty``    -- the value cell holds a self-closing ``<p />``.
3. ``fallback`` -- the whole value cell, tags stripped, if non-empty.

Every pattern is anchored on the Status label cell and only ever reads the
cell immediately after it, so a different row's value can never match.

The sync and report paths resolve an empty status differently; see
``status_for_sync`` and ``status_for_report``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

UNKNOWN_STATUS = "Unknown"

# Label cell followed by the opening of the adjacent value cell.
_LABEL = r"Status</span></strong></p></td>\s*<td[^>]*>"

_PRIMARY = re.compile(_LABEL + r"\s*<p[^>]*>([^<]+)</p>", re.IGNORECASE)
_EMPTY = re.compile(_LABEL + r"\s*<p\s*/>", re.IGNORECASE)
_CELL = re.compile(_LABEL + r"(.*?)</td>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")


class ExtractionKind(str, Enum):
    FOUND = "found"
    EMPTY = "empty"
    MISSING = "missing"


@dataclass(frozen=True)
class Extraction:
    """Outcome of running the strategies over one page body."""

    kind: ExtractionKind
    status: str | None = None
    strategy: str | None = None


@dataclass(frozen=True)
class ExtractionStrategy:
    """A named matcher. ``match`` returns an Extraction or None to pass."""

    name: str
    match: Callable[[str], Extraction | None]


def _match_primary(markup: str) -> Extraction | None:
    m = _PRIMARY.search(markup)
    if m is None or not m.group(1).strip():
        return None
    return Extraction(ExtractionKind.FOUND, m.group(1).strip(), "primary")


def _match_empty(markup: str) -> Extraction | None:
    if _EMPTY.search(markup) is None:
        return None
    return Extraction(ExtractionKind.EMPTY, None, "empty")


def _match_fallback(markup: str) -> Extraction | None:
    m = _CELL.search(markup)
    if m is None:
        return None
    text = _TAG.sub("", m.group(1)).strip()
    if not text:
        return None
    return Extraction(ExtractionKind.FOUND, text, "fallback")


STRATEGIES: tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy("primary", _match_primary),
    ExtractionStrategy("empty", _match_empty),
    ExtractionStrategy("fallback", _match_fallback),
)


def extract(
    markup: str | None,
    strategies: tuple[ExtractionStrategy, ...] = STRATEGIES,
) -> Extraction:
    """Run *strategies* in order over *markup*; the first match wins."""
    if markup:
        for strategy in strategies:
            result = strategy.match(markup)
            if result is not None:
                return result
    return Extraction(ExtractionKind.MISSING)


def status_for_sync(extraction: Extraction) -> str | None:
    """Status to act on when syncing indicators.

    A blank or missing status is None: the page is skipped rather than
    given an indicator.
    """
    if extraction.kind == ExtractionKind.FOUND:
        return extraction.status
    return None


def status_for_report(extraction: Extraction) -> str:
    """Status to display in the report; blank or missing reads "Unknown"."""
    if extraction.kind == ExtractionKind.FOUND and extraction.status:
        return extraction.status
    return UNKNOWN_STATUS


def extract_status(markup: str | None) -> str | None:
    """Shorthand for ``status_for_sync(extract(markup))``."""
    return status_for_sync(extract(markup))
