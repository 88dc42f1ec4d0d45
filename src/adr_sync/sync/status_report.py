"""ADR status report: one row per ADR, a count per status, the next number."""

from __future__ import annotations

from collections import Counter
from datetime import date

from pydantic import BaseModel

from adr_sync.sync.extractor import extract, status_for_report
from adr_sync.sync.indicators import symbol_for_status
from adr_sync.sync.models import AdrPage
from adr_sync.sync.titles import TitleFilter, adr_id, short_title


class ReportEntry(BaseModel):
    number: int
    id: str
    full_title: str
    short_title: str
    status: str
    symbol: str
    url: str | None = None
    page_id: str
    last_modified: str | None = None

    model_config = {"frozen": True}

    @property
    def modified_date(self) -> str:
        """Date part of ``last_modified``, or ``"N/A"``."""
        if not self.last_modified:
            return "N/A"
        return self.last_modified.split("T", 1)[0]


class StatusReport(BaseModel):
    generated: str
    entries: list[ReportEntry] = []

    model_config = {"frozen": True}

    def status_counts(self) -> list[tuple[str, int]]:
        """``(status, count)`` pairs, most common first."""
        counts = Counter(e.status for e in self.entries)
        return sorted(counts.items(), key=lambda item: -item[1])

    @property
    def next_number(self) -> int:
        numbers = [e.number for e in self.entries if e.number >= 0]
        return max(numbers, default=0) + 1


def build_status_report(
    pages: list[AdrPage],
    titles: TitleFilter,
    site_url: str | None = None,
    today: date | None = None,
) -> StatusReport:
    """Build a report over the ADRs in *pages*, sorted by number."""
    entries = []
    for page in pages:
        if not titles.is_adr(page.title):
            continue
        number = titles.number(page.title)
        status = status_for_report(extract(page.body))
        url = None
        if site_url and page.webui:
            url = f"{site_url.rstrip('/')}/wiki{page.webui}"
        entries.append(
            ReportEntry(
                number=number,
                id=adr_id(number),
                full_title=page.title,
                short_title=short_title(page.title),
                status=status,
                symbol=symbol_for_status(status),
                url=url,
                page_id=page.id,
                last_modified=page.last_modified,
            )
        )

    entries.sort(key=lambda e: e.number)
    return StatusReport(
        generated=(today or date.today()).isoformat(),
        entries=entries,
    )
