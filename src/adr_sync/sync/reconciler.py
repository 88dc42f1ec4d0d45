"""Read-check-write reconciliation of page content properties.

Confluence has no multi-property transaction, so each property is driven
to its target value on its own:

1. Look the property up by key. Absent: create it.
2. Present with the target value: nothing to do.
3. Otherwise read the detail view for the current version (the list view
   does not reliably carry it). No usable version: fail.
4. Update with ``version + 1``. Confluence rejects the write if the version
   moved in the meantime; the conflict is reported, not retried.

Failures are returned as ``PropertyResult`` values and never raised, so the
caller can tell a partial update from a full one.
"""

from __future__ import annotations

import logging

import requests

from adr_sync.core.client import (
    ConfluenceAPIError,
    ConfluenceClient,
    VersionConflictError,
)
from adr_sync.sync.models import (
    ContentProperty,
    PropertyOutcome,
    PropertyResult,
)

logger = logging.getLogger(__name__)

MISSING_VERSION = "missing version metadata"
MISSING_ID = "property listing has no id"


class PropertyReconciler:
    """Drive page content properties to target values.

    Args:
        client: Confluence client used for every property call.
    """

    def __init__(self, client: ConfluenceClient) -> None:
        self.client = client

    def reconcile(self, page_id: str, key: str, value: str) -> PropertyResult:
        """Ensure property *key* on *page_id* holds *value*."""
        try:
            return self._reconcile(page_id, key, value)
        except VersionConflictError as exc:
            logger.warning(
                "Version conflict on %s for page %s: %s", key, page_id, exc
            )
            return PropertyResult(
                key=key,
                outcome=PropertyOutcome.FAILED,
                error=f"version conflict: {exc.message}",
            )
        except (
            ConfluenceAPIError,
            requests.RequestException,
            ValueError,
            KeyError,
            TypeError,
        ) as exc:
            logger.warning(
                "Failed to reconcile %s for page %s: %s", key, page_id, exc
            )
            return PropertyResult(
                key=key, outcome=PropertyOutcome.FAILED, error=str(exc)
            )

    def _reconcile(self, page_id: str, key: str, value: str) -> PropertyResult:
        listed = self.client.find_property(page_id, key)

        if listed is None:
            created = self.client.create_property(page_id, key, value)
            logger.debug("Created %s=%s on page %s", key, value, page_id)
            return PropertyResult(
                key=key,
                outcome=PropertyOutcome.CREATED,
                version=_version_of(created),
            )

        existing = ContentProperty.from_api(listed)
        if not existing.id:
            return PropertyResult(
                key=key, outcome=PropertyOutcome.FAILED, error=MISSING_ID
            )

        if str(existing.value) == value:
            return PropertyResult(
                key=key,
                outcome=PropertyOutcome.UNCHANGED,
                version=existing.version,
            )

        detail = ContentProperty.from_api(
            self.client.get_property(page_id, existing.id)
        )
        if not detail.id or detail.version is None or detail.version < 1:
            return PropertyResult(
                key=key, outcome=PropertyOutcome.FAILED, error=MISSING_VERSION
            )

        new_version = detail.version + 1
        updated = self.client.update_property(
            page_id, existing.id, key, value, new_version
        )
        logger.debug(
            "Updated %s on page %s: %r -> %r (v%d)",
            key,
            page_id,
            existing.value,
            value,
            new_version,
        )
        return PropertyResult(
            key=key,
            outcome=PropertyOutcome.UPDATED,
            previous_version=detail.version,
            version=_version_of(updated) or new_version,
        )

    # ------------------------------------------------------------------
    # Manual property management
    # ------------------------------------------------------------------

    def read(self, page_id: str, key: str) -> ContentProperty | None:
        """Return the property's detail view (with version), or None."""
        listed = self.client.find_property(page_id, key)
        if listed is None:
            return None
        return ContentProperty.from_api(
            self.client.get_property(page_id, _listed_id(listed, key))
        )

    def remove(self, page_id: str, key: str) -> bool:
        """Delete property *key*. Returns False when it was not present.

        Errors propagate: removal is an explicit operator action.
        """
        listed = self.client.find_property(page_id, key)
        if listed is None:
            return False
        self.client.delete_property(page_id, _listed_id(listed, key))
        logger.info("Removed %s from page %s", key, page_id)
        return True


def _listed_id(listed: dict, key: str) -> str:
    property_id = ContentProperty.from_api(listed).id
    if not property_id:
        raise ValueError(f"Property {key}: {MISSING_ID}")
    return property_id


def _version_of(response: dict | None) -> int | None:
    if not response:
        return None
    return ContentProperty.from_api(response).version
