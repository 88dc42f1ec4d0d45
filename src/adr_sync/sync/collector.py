"""Paginated discovery of the ADR page set.

Pages are found with a CQL ancestor search restricted to one space, with
bodies and versions expanded inline so no second request per page is
needed. The collector follows the search offset until Confluence stops
returning a ``next`` link. Any failed request propagates: a partial page
set would silently under-report.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from adr_sync.core.client import ConfluenceClient
from adr_sync.sync.models import AdrPage
from adr_sync.validators import validate_page_id, validate_space_key

logger = logging.getLogger(__name__)

EXPAND = "body.storage,version"


def build_cql(space_key: str, parent_page_id: str) -> str:
    """CQL for every page under *parent_page_id* in *space_key*.

    Raises:
        ValueError: If either value could alter the query.
    """
    for check, value in (
        (validate_space_key, space_key),
        (validate_page_id, parent_page_id),
    ):
        is_valid, error_msg = check(value)
        if not is_valid:
            raise ValueError(f"{error_msg}: {value!r}")
    return (
        f'space = "{space_key}" AND type = page '
        f"AND ancestor = {parent_page_id}"
    )


class PageCollector:
    """Yield every page below a parent page.

    Args:
        client: Confluence client.
        space_key: Space the pages live in.
        parent_page_id: Ancestor page id.
        page_size: Results per search request.
    """

    def __init__(
        self,
        client: ConfluenceClient,
        space_key: str,
        parent_page_id: str,
        page_size: int = 50,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.client = client
        self.cql = build_cql(space_key, parent_page_id)
        self.page_size = page_size

    def iter_pages(self) -> Iterator[AdrPage]:
        """Lazily yield pages, one search request per batch."""
        start = 0
        while True:
            data = self.client.search_content(
                self.cql,
                start=start,
                limit=self.page_size,
                expand=EXPAND,
            )
            results = data.get("results") or []
            logger.debug(
                "Search batch at offset %d returned %d pages",
                start,
                len(results),
            )
            for item in results:
                yield AdrPage.from_api(item)

            if not results or not (data.get("_links") or {}).get("next"):
                return
            start += len(results)

    def collect(self) -> list[AdrPage]:
        """Return the complete page set, or raise on the first failure."""
        pages = list(self.iter_pages())
        logger.info("Collected %d pages (%s)", len(pages), self.cql)
        return pages
