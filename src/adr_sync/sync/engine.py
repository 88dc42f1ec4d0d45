"""Sync engine that drives ADR indicator properties from page status.

The ``SyncEngine`` ties the collector, extractor, indicator mapping and
property reconciler into one run. It:

1. Collects the complete page set (a failure here aborts the run).
2. Drops pages whose titles are not ADRs.
3. Extracts each page's status and maps it to an indicator.
4. Reconciles every configured property against the indicator, unless
   this is a dry run.
5. Classifies the page and hands the result to ``on_result`` at once.
6. Returns a ``SyncReport`` tally.

Pages are processed one at a time, in collection order. A failure on one
page's property is recorded on that page and the run continues.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from adr_sync.config_schema import AdrConfig
from adr_sync.core.client import ConfluenceClient
from adr_sync.sync.collector import PageCollector
from adr_sync.sync.extractor import extract, status_for_sync
from adr_sync.sync.indicators import map_status, property_value
from adr_sync.sync.models import (
    AdrPage,
    DocumentOutcome,
    PropertyResult,
    SyncReport,
    SyncResult,
)
from adr_sync.sync.reconciler import PropertyReconciler
from adr_sync.sync.titles import TitleFilter

logger = logging.getLogger(__name__)


def classify(properties: list[PropertyResult]) -> DocumentOutcome:
    """Classify a page from its property results.

    All succeeded: UPDATED if any value changed, else UNCHANGED. Some but
    not all failed: PARTIAL. All failed: ERROR.
    """
    failed = sum(1 for p in properties if not p.ok)
    if failed == 0:
        if any(p.changed for p in properties):
            return DocumentOutcome.UPDATED
        return DocumentOutcome.UNCHANGED
    if failed == len(properties):
        return DocumentOutcome.ERROR
    return DocumentOutcome.PARTIAL


class SyncEngine:
    """Run indicator sync over every ADR under the configured parent page.

    Args:
        client: ConfluenceClient for search and property calls.
        profile: ADR collection settings.
        on_result: Called with each ``SyncResult`` as soon as it exists.
    """

    def __init__(
        self,
        client: ConfluenceClient,
        profile: AdrConfig,
        on_result: Callable[[SyncResult], None] | None = None,
    ) -> None:
        if not profile.space_key or not profile.parent_page_id:
            raise ValueError(
                "AdrConfig needs space_key and parent_page_id to sync"
            )
        self.client = client
        self.profile = profile
        self.on_result = on_result

        self.collector = PageCollector(
            client,
            profile.space_key,
            profile.parent_page_id,
            profile.page_size,
        )
        self.titles = TitleFilter.from_config(profile)
        self.reconciler = PropertyReconciler(client)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def collect_adrs(self) -> list[AdrPage]:
        """Collect all pages and keep only ADRs.

        Raises whatever the collector raises; no partial set is returned.
        """
        pages = self.collector.collect()
        adrs = [p for p in pages if self.titles.is_adr(p.title)]
        logger.info(
            "Found %d ADR pages (%d excluded)",
            len(adrs),
            len(pages) - len(adrs),
        )
        return adrs

    def run(
        self,
        dry_run: bool = False,
        pages: list[AdrPage] | None = None,
    ) -> SyncReport:
        """Execute one sync pass.

        Args:
            dry_run: If ``True``, compute indicators but write nothing.
            pages: ADR pages already returned by ``collect_adrs``; collected
                here when omitted.

        Returns:
            A ``SyncReport`` with one result per ADR page.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        adrs = self.collect_adrs() if pages is None else pages

        results: list[SyncResult] = []
        for page in adrs:
            result = self.sync_page(page, dry_run)
            results.append(result)
            logger.debug(
                "%s (%s): %s", page.title, page.id, result.outcome.value
            )
            if self.on_result is not None:
                self.on_result(result)

        return SyncReport(
            dry_run=dry_run,
            results=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    # ------------------------------------------------------------------
    # Per-page sync
    # ------------------------------------------------------------------

    def sync_page(self, page: AdrPage, dry_run: bool = False) -> SyncResult:
        """Sync a single ADR page and classify the outcome."""
        extraction = extract(page.body)
        status = status_for_sync(extraction)
        if not status:
            return SyncResult(
                page_id=page.id,
                title=page.title,
                outcome=DocumentOutcome.SKIPPED_UNPARSEABLE,
            )

        indicator = map_status(status)
        if indicator is None:
            return SyncResult(
                page_id=page.id,
                title=page.title,
                outcome=DocumentOutcome.SKIPPED_NON_STANDARD,
                status=status,
            )

        if dry_run:
            return SyncResult(
                page_id=page.id,
                title=page.title,
                outcome=DocumentOutcome.PREVIEW,
                status=status,
                indicator=indicator,
            )

        value = property_value(indicator, self.profile.property_value)
        properties = [
            self.reconciler.reconcile(page.id, key, value)
            for key in self.profile.property_keys
        ]
        return SyncResult(
            page_id=page.id,
            title=page.title,
            outcome=classify(properties),
            status=status,
            indicator=indicator,
            properties=properties,
        )
