"""Status to indicator mapping.

The table is fixed and built once at import as a read-only mapping. Lookups
trim and case-fold the status; anything not listed maps to None so an
unrecognised status never receives a guessed indicator.
"""

from __future__ import annotations

from types import MappingProxyType

from .models import Indicator

ACCEPTED = Indicator(code="accepted", symbol="✅")
PENDING = Indicator(code="pending", symbol="⏳")
DRAFT = Indicator(code="draft", symbol="\U0001f5d2\ufe0f")
WITHDRAWN = Indicator(code="withdrawn", symbol="\U0001f6ab")
POSTPONED = Indicator(code="postponed", symbol="✋")

INDICATORS: MappingProxyType[str, Indicator] = MappingProxyType(
    {
        ind.code: ind
        for ind in (ACCEPTED, PENDING, DRAFT, WITHDRAWN, POSTPONED)
    }
)

STATUS_INDICATORS: MappingProxyType[str, Indicator] = MappingProxyType(
    {
        "accepted": ACCEPTED,
        "approved": ACCEPTED,
        "proposal": PENDING,
        "proposed": PENDING,
        "pending approval": PENDING,
        "draft": DRAFT,
        "planning": DRAFT,
        "withdrawn": WITHDRAWN,
        "rejected": WITHDRAWN,
        "postponed": POSTPONED,
    }
)

# Shown in reports for statuses without an indicator.
UNKNOWN_SYMBOL = "❓"


def normalize_status(status: str | None) -> str:
    """Trim, collapse inner whitespace and case-fold a status string."""
    if not status:
        return ""
    return " ".join(status.split()).casefold()


def map_status(status: str | None) -> Indicator | None:
    """Return the indicator for *status*, or None when it has none."""
    return STATUS_INDICATORS.get(normalize_status(status))


def indicator_for_code(value: str | None) -> Indicator | None:
    """Resolve a stored property value back to its indicator.

    Accepts an indicator code (``"draft"``) or a hex code point
    (``"1f5d2"``), which is what older pages carry.
    """
    key = normalize_status(value)
    if key in INDICATORS:
        return INDICATORS[key]
    for indicator in INDICATORS.values():
        if indicator.codepoint == key:
            return indicator
    return None


def symbol_for_status(status: str | None) -> str:
    """Indicator symbol for display, ``UNKNOWN_SYMBOL`` when unmapped."""
    indicator = map_status(status)
    return indicator.symbol if indicator else UNKNOWN_SYMBOL


def property_value(indicator: Indicator, value_format: str = "code") -> str:
    """Value written to the indicator properties for *value_format*."""
    if value_format == "codepoint":
        return indicator.codepoint
    return indicator.code
