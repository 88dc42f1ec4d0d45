"""Fixture builders and an in-memory Confluence client shared by the tests."""

from __future__ import annotations

import itertools
from typing import Any

from adr_sync.config import Config
from adr_sync.core.client import ConfluenceAPIError, VersionConflictError

# ---------------------------------------------------------------------------
# Markup helpers
# ---------------------------------------------------------------------------

LABEL_CELL = (
    '<td><p><strong><span style="color: rgb(23,43,77);">Status</span>'
    "</strong></p></td>"
)


def card_table(value_cell: str) -> str:
    """Wrap a Status value cell in a minimal ADR card table."""
    return (
        "<table><tbody>"
        '<tr><td><p><strong><span style="color: rgb(23,43,77);">Owner</span>'
        "</strong></p></td><td><p>Platform team</p></td></tr>"
        f"<tr>{LABEL_CELL}{value_cell}</tr>"
        '<tr><td><p><strong><span style="color: rgb(23,43,77);">Date</span>'
        "</strong></p></td><td><p>2026-01-12</p></td></tr>"
        "</tbody></table><h2>Context</h2><p>...</p>"
    )


def status_body(status: str) -> str:
    return card_table(f"<td><p>{status}</p></td>")


def page_dict(
    page_id: str,
    title: str,
    body: str = "",
    when: str = "2026-02-01T09:30:00.000Z",
) -> dict[str, Any]:
    """A v1 content search result expanded with body.storage and version."""
    return {
        "id": page_id,
        "type": "page",
        "title": title,
        "body": {"storage": {"value": body, "representation": "storage"}},
        "version": {"number": 3, "when": when},
        "_links": {"webui": f"/spaces/CE/pages/{page_id}"},
    }


# ---------------------------------------------------------------------------
# Fake client
# ---------------------------------------------------------------------------


class FakeConfluenceClient:
    """In-memory stand-in for ConfluenceClient.

    Stores pages as v1 search results and properties per page. Mutating
    calls are recorded in ``writes``; every call is recorded in ``calls``.
    ``failures`` maps ``(method, key)`` to an exception raised on that
    call (``key`` is None for search).
    """

    def __init__(
        self,
        pages: list[dict[str, Any]] | None = None,
        listed_versions: bool = False,
    ) -> None:
        self.config = Config(
            site="example.atlassian.net",
            email="dev@example.com",
            api_token="token",
        )
        self.pages = pages or []
        self.properties: dict[str, dict[str, dict[str, Any]]] = {}
        self.listed_versions = listed_versions
        self.failures: dict[tuple[str, str | None], Exception] = {}
        self.calls: list[tuple[str, ...]] = []
        self.writes: list[tuple[str, ...]] = []
        self._ids = itertools.count(9000)

    # -- helpers -------------------------------------------------------

    def _maybe_fail(self, method: str, key: str | None) -> None:
        exc = self.failures.get((method, key))
        if exc is not None:
            raise exc

    def set_property(
        self, page_id: str, key: str, value: Any, version: int | None = 1
    ) -> dict[str, Any]:
        prop: dict[str, Any] = {"id": str(next(self._ids)), "key": key, "value": value}
        if version is not None:
            prop["version"] = {"number": version}
        self.properties.setdefault(page_id, {})[key] = prop
        return prop

    def stored(self, page_id: str, key: str) -> dict[str, Any] | None:
        return self.properties.get(page_id, {}).get(key)

    def _by_id(self, page_id: str, property_id: str) -> dict[str, Any]:
        for prop in self.properties.get(page_id, {}).values():
            if prop["id"] == property_id:
                return prop
        raise ConfluenceAPIError(404, f"Property {property_id} not found")

    # -- client API ----------------------------------------------------

    def search_content(self, cql, start=0, limit=50, expand=None):
        self.calls.append(("search_content", cql, str(start), str(limit)))
        self._maybe_fail("search_content", None)
        batch = self.pages[start : start + limit]
        data: dict[str, Any] = {
            "results": batch,
            "start": start,
            "limit": limit,
            "size": len(batch),
            "_links": {},
        }
        if start + limit < len(self.pages):
            data["_links"]["next"] = (
                f"/rest/api/content/search?start={start + limit}"
            )
        return data

    def find_property(self, page_id, key):
        self.calls.append(("find_property", page_id, key))
        self._maybe_fail("find_property", key)
        prop = self.stored(page_id, key)
        if prop is None:
            return None
        listed = {k: v for k, v in prop.items() if k != "version"}
        if self.listed_versions and "version" in prop:
            listed["version"] = dict(prop["version"])
        return listed

    def get_property(self, page_id, property_id):
        self.calls.append(("get_property", page_id, property_id))
        prop = self._by_id(page_id, property_id)
        self._maybe_fail("get_property", prop["key"])
        return dict(prop)

    def create_property(self, page_id, key, value):
        self.calls.append(("create_property", page_id, key))
        self._maybe_fail("create_property", key)
        if self.stored(page_id, key) is not None:
            raise ConfluenceAPIError(400, f"Property {key} already exists")
        self.writes.append(("create", page_id, key, value))
        return dict(self.set_property(page_id, key, value, version=1))

    def update_property(self, page_id, property_id, key, value, version):
        self.calls.append(("update_property", page_id, key))
        self._maybe_fail("update_property", key)
        prop = self._by_id(page_id, property_id)
        current = prop.get("version", {}).get("number", 0)
        if version != current + 1:
            raise VersionConflictError(
                409, f"Version must be incremented (current {current})"
            )
        self.writes.append(("update", page_id, key, value))
        prop["value"] = value
        prop["version"] = {"number": version}
        return dict(prop)

    def delete_property(self, page_id, property_id):
        self.calls.append(("delete_property", page_id, property_id))
        prop = self._by_id(page_id, property_id)
        self._maybe_fail("delete_property", prop["key"])
        self.writes.append(("delete", page_id, prop["key"]))
        del self.properties[page_id][prop["key"]]
        return True


