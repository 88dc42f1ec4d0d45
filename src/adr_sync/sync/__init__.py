"""ADR status indicator sync engine.

Keeps the indicator properties on ADR pages in Confluence in line with the
status written in each page's card table.

Modules:

- ``collector``     -- ``PageCollector``: paginated CQL discovery of pages.
- ``extractor``     -- ordered status extraction strategies.
- ``indicators``    -- fixed status to indicator table.
- ``reconciler``    -- ``PropertyReconciler``: versioned property writes.
- ``engine``        -- ``SyncEngine``: orchestrates a full run.
- ``titles``        -- ADR title filter and number helpers.
- ``status_report`` -- status report over the ADR set.
- ``models``        -- data contracts.
- ``reporter``      -- text and JSON formatting.

Usage example
-------------
::

    from adr_sync.config_schema import AdrConfig
    from adr_sync.core.client import ConfluenceClient
    from adr_sync.sync import SyncEngine, format_result_line, format_tally

    profile = AdrConfig(space_key="CE", parent_page_id="31859277900")
    engine = SyncEngine(
        client=confluence_client,
        profile=profile,
        on_result=lambda r: print(format_result_line(r)),
    )

    preview = engine.run(dry_run=True)
    report = engine.run(dry_run=False)
    print(format_tally(report))
"""

from .collector import PageCollector
from .engine import SyncEngine, classify
from .extractor import extract, extract_status, status_for_report, status_for_sync
from .indicators import map_status
from .models import (
    AdrPage,
    ContentProperty,
    DocumentOutcome,
    Indicator,
    PropertyOutcome,
    PropertyResult,
    SyncReport,
    SyncResult,
)
from .reconciler import PropertyReconciler
from .reporter import (
    format_result_line,
    format_run_header,
    format_status_markdown,
    format_tally,
    report_to_json,
    status_report_to_json,
)
from .status_report import StatusReport, build_status_report
from .titles import TitleFilter

__all__ = [
    "AdrPage",
    "ContentProperty",
    "DocumentOutcome",
    "Indicator",
    "PageCollector",
    "PropertyOutcome",
    "PropertyReconciler",
    "PropertyResult",
    "StatusReport",
    "SyncEngine",
    "SyncReport",
    "SyncResult",
    "TitleFilter",
    "build_status_report",
    "classify",
    "extract",
    "extract_status",
    "format_result_line",
    "format_run_header",
    "format_status_markdown",
    "format_tally",
    "map_status",
    "report_to_json",
    "status_for_report",
    "status_for_sync",
    "status_report_to_json",
]
