"""Report formatting functions.

Provides human-readable and machine-readable output:

- ``format_run_header`` -- first line of a sync run.
- ``format_result_line`` -- one progress line per synced page.
- ``format_tally`` -- closing counts line.
- ``report_to_json`` -- structured dict for a sync run.
- ``format_status_markdown`` / ``status_report_to_json`` -- status report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import DocumentOutcome
from .titles import adr_id

if TYPE_CHECKING:
    from .models import SyncReport, SyncResult
    from .status_report import StatusReport

WARNING_SYMBOL = "⚠️"
ERROR_SYMBOL = "❌"

# ------------------------------------------------------------------
# Sync progress
# ------------------------------------------------------------------


def format_run_header(dry_run: bool) -> str:
    if dry_run:
        return "DRY RUN -- no changes will be made"
    return "Syncing ADR status indicators..."


def format_result_line(result: SyncResult) -> str:
    """Format one page's outcome as a single progress line."""
    title = result.title
    outcome = result.outcome

    if outcome == DocumentOutcome.SKIPPED_UNPARSEABLE:
        return f"  {WARNING_SYMBOL}  {title}: could not extract status, skipping"

    if outcome == DocumentOutcome.SKIPPED_NON_STANDARD:
        return (
            f"  {WARNING_SYMBOL}  {title}: non-standard status "
            f'"{result.status}", skipping'
        )

    if outcome == DocumentOutcome.PARTIAL:
        states = ", ".join(
            f"{p.key}={'ok' if p.ok else 'failed'}" for p in result.properties
        )
        return f"  {WARNING_SYMBOL}  {title}: partial update ({states})"

    if outcome == DocumentOutcome.ERROR:
        detail = "; ".join(result.errors)
        return f"  {ERROR_SYMBOL}  {title}: failed to update indicator ({detail})"

    symbol = result.indicator.symbol if result.indicator else "?"
    line = f"  {symbol}  {title}  ->  {result.status}"
    if outcome == DocumentOutcome.UNCHANGED:
        line += "  (unchanged)"
    return line


def format_tally(report: SyncReport) -> str:
    """Closing line with counts per classification."""
    parts = []
    if report.dry_run:
        parts.append(f"Would update: {len(report.previewed)}")
    else:
        parts.append(f"Updated: {len(report.updated)}")
        parts.append(f"Unchanged: {len(report.unchanged)}")
    counts = report.counts()
    parts.append(
        f"Skipped: {counts[DocumentOutcome.SKIPPED_UNPARSEABLE.value]} unparseable"
        f", {counts[DocumentOutcome.SKIPPED_NON_STANDARD.value]} non-standard"
    )
    if not report.dry_run:
        parts.append(f"Partial: {len(report.partial)}")
        parts.append(f"Errors: {len(report.errors)}")
    return f"{'-' * 50}\nDone!  " + "  |  ".join(parts)


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a structured dict for JSON serialisation."""
    results_list = []
    for r in report.results:
        entry: dict = {
            "page_id": r.page_id,
            "title": r.title,
            "outcome": r.outcome.value,
            "status": r.status,
        }
        if r.indicator is not None:
            entry["indicator"] = r.indicator.code
            entry["symbol"] = r.indicator.symbol
        if r.properties:
            entry["properties"] = [
                {
                    "key": p.key,
                    "outcome": p.outcome.value,
                    "version": p.version,
                    **({"error": p.error} if p.error else {}),
                }
                for p in r.properties
            ]
        results_list.append(entry)

    return {
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {"total": len(report.results), **report.counts()},
        "results": results_list,
    }


# ------------------------------------------------------------------
# Status report
# ------------------------------------------------------------------


def format_status_markdown(report: StatusReport) -> str:
    """Render the status report as a markdown table plus summary."""
    lines = [
        "# ADR Status Report",
        "",
        f"> Generated: {report.generated}",
        "",
        "| # | Title | Status | Last Modified |",
        "|---|-------|--------|---------------|",
    ]
    for e in report.entries:
        link = f"[{e.id}]({e.url})" if e.url else e.id
        lines.append(
            f"| {link} | {e.short_title} | {e.symbol} {e.status} | {e.modified_date} |"
        )

    lines += ["", "## Summary", "", f"**Total ADRs:** {len(report.entries)}", ""]
    symbols = {e.status: e.symbol for e in report.entries}
    for status, count in report.status_counts():
        lines.append(f"- {symbols[status]} **{status}**: {count}")

    lines += [
        "",
        f"**Next available ADR number:** {adr_id(report.next_number)}",
    ]
    return "\n".join(lines)


def status_report_to_json(report: StatusReport) -> list[dict]:
    """Entries as plain dicts, in report order."""
    return [
        {
            "number": e.number,
            "id": e.id,
            "fullTitle": e.full_title,
            "shortTitle": e.short_title,
            "status": e.status,
            "symbol": e.symbol,
            "url": e.url,
            "pageId": e.page_id,
            "lastModified": e.last_modified,
        }
        for e in report.entries
    ]
