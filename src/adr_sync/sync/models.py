"""Pydantic models for the ADR indicator sync engine.

Defines the data contracts used across all sync modules:

- ``AdrPage``: One Confluence page from the ADR tree.
- ``Indicator``: Canonical status indicator (code + emoji symbol).
- ``ContentProperty``: A versioned key/value record attached to a page.
- ``PropertyOutcome`` / ``PropertyResult``: Outcome of reconciling one property.
- ``DocumentOutcome`` / ``SyncResult``: Classification of one page.
- ``SyncReport``: Aggregate tally for a full sync run.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class AdrPage(BaseModel):
    """A page returned by the collector.

    Attributes:
        id: Store-assigned page id.
        title: Page title, e.g. ``"ADR-003: Use X"``.
        body: Storage-format markup (empty when the page has no body).
        last_modified: ISO 8601 timestamp of the latest version.
        webui: Relative web UI link, e.g. ``"/spaces/CE/pages/123"``.
    """

    id: str
    title: str
    body: str = ""
    last_modified: str | None = None
    webui: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> AdrPage:
        """Build from a v1 ``content`` result expanded with body and version."""
        body = ((data.get("body") or {}).get("storage") or {}).get("value")
        version = data.get("version") or {}
        links = data.get("_links") or {}
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            body=body or "",
            last_modified=version.get("when"),
            webui=links.get("webui"),
        )


class Indicator(BaseModel):
    """Canonical status indicator.

    Attributes:
        code: Stable key (accepted, pending, draft, withdrawn, postponed).
        symbol: Emoji shown next to the page title.
    """

    code: str
    symbol: str

    model_config = {"frozen": True}

    @property
    def codepoint(self) -> str:
        """Lower-case hex code point of the symbol, as Confluence stores emoji."""
        return f"{ord(self.symbol[0]):x}"


class ContentProperty(BaseModel):
    """A page content property.

    ``version`` is ``None`` when the store did not report one; the list
    view does not reliably include it.
    """

    id: str
    key: str
    value: Any = None
    version: int | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> ContentProperty:
        """Build from a v2 property body.

        A missing body or id gives an empty ``id``; callers treat that as a
        malformed response.
        """
        data = data if isinstance(data, dict) else {}
        version = data.get("version")
        number = version.get("number") if isinstance(version, dict) else None
        return cls(
            id=str(data.get("id") or ""),
            key=data.get("key") or "",
            value=data.get("value"),
            version=number if isinstance(number, int) else None,
        )


class PropertyOutcome(str, Enum):
    """What happened to one property during reconciliation."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class PropertyResult(BaseModel):
    """Result of reconciling one property on one page.

    Attributes:
        key: Property key.
        outcome: What happened.
        previous_version: Version before the write (updates only).
        version: Version after the call, when known.
        error: Failure description when ``outcome`` is FAILED.
    """

    key: str
    outcome: PropertyOutcome
    previous_version: int | None = None
    version: int | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.outcome != PropertyOutcome.FAILED

    @property
    def changed(self) -> bool:
        return self.outcome in (
            PropertyOutcome.CREATED,
            PropertyOutcome.UPDATED,
        )


class DocumentOutcome(str, Enum):
    """Classification of one ADR page in a sync run."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    PARTIAL = "partial"
    ERROR = "error"
    SKIPPED_UNPARSEABLE = "skipped_unparseable"
    SKIPPED_NON_STANDARD = "skipped_non_standard"
    PREVIEW = "preview"


class SyncResult(BaseModel):
    """Result of syncing one page.

    Attributes:
        page_id: Confluence page id.
        title: Page title.
        outcome: Classification.
        status: Extracted status text, if any.
        indicator: Resolved indicator, if any.
        properties: Per-property results (empty unless reconciled).
    """

    page_id: str
    title: str
    outcome: DocumentOutcome
    status: str | None = None
    indicator: Indicator | None = None
    properties: list[PropertyResult] = []

    model_config = {"frozen": True}

    @property
    def errors(self) -> list[str]:
        return [
            f"{p.key}: {p.error}" for p in self.properties if not p.ok
        ]


class SyncReport(BaseModel):
    """Aggregate report (the tally) for one sync run.

    Attributes:
        dry_run: Whether this was a dry-run (no changes applied).
        results: Per-page results in processing order.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run completed.
    """

    dry_run: bool = False
    results: list[SyncResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    def _with(self, outcome: DocumentOutcome) -> list[SyncResult]:
        return [r for r in self.results if r.outcome == outcome]

    @property
    def updated(self) -> list[SyncResult]:
        return self._with(DocumentOutcome.UPDATED)

    @property
    def unchanged(self) -> list[SyncResult]:
        return self._with(DocumentOutcome.UNCHANGED)

    @property
    def partial(self) -> list[SyncResult]:
        return self._with(DocumentOutcome.PARTIAL)

    @property
    def errors(self) -> list[SyncResult]:
        return self._with(DocumentOutcome.ERROR)

    @property
    def previewed(self) -> list[SyncResult]:
        return self._with(DocumentOutcome.PREVIEW)

    @property
    def skipped(self) -> list[SyncResult]:
        """Results skipped for an unparseable or non-standard status."""
        return [
            r
            for r in self.results
            if r.outcome
            in (
                DocumentOutcome.SKIPPED_UNPARSEABLE,
                DocumentOutcome.SKIPPED_NON_STANDARD,
            )
        ]

    def counts(self) -> dict[str, int]:
        """Count results per classification, including zero counts."""
        tally = {outcome.value: 0 for outcome in DocumentOutcome}
        for r in self.results:
            tally[r.outcome.value] += 1
        return tally

    @property
    def has_failures(self) -> bool:
        return bool(self.partial or self.errors)
