import logging
from typing import Any

import requests

from ..config import Config
from ..validators import validate_page_id, validate_property_key

logger = logging.getLogger(__name__)


class ConfluenceAPIError(Exception):
    """Non-success response from Confluence."""

    def __init__(self, status: int | None, message: str):
        self.status = status
        self.message = message
        if status is None:
            super().__init__(message)
        else:
            super().__init__(f"API error ({status}): {message}")

    @classmethod
    def from_response(cls, response: requests.Response) -> "ConfluenceAPIError":
        message = _error_message(response)
        if response.status_code == 409:
            return VersionConflictError(response.status_code, message)
        return cls(response.status_code, message)


class VersionConflictError(ConfluenceAPIError):
    """The stored version moved since it was read (HTTP 409)."""


def _error_message(response: requests.Response) -> str:
    """Pull the most useful message out of a Confluence error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or "Unknown error"

    if isinstance(data, dict):
        if data.get("errorMessages"):
            return ", ".join(str(m) for m in data["errorMessages"])
        for field in ("message", "errorMessage"):
            if data.get(field):
                return str(data[field])
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            titles = [
                str(e.get("title") or e.get("detail") or e)
                for e in errors
                if isinstance(e, dict)
            ]
            if titles:
                return ", ".join(titles)
    return response.text or "Unknown error"


class ConfluenceClient:
    def __init__(self, config: Config):
        self.config = config
        self._session: requests.Session | None = None
        self.api_v1_url = f"{config.base_url}/wiki/rest/api"
        self.api_v2_url = f"{config.base_url}/wiki/api/v2"

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.auth = (self.config.email, self.config.api_token)
        session.verify = not self.config.insecure
        session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        return session

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        payload: Any = None,
    ) -> Any:
        """
        Make a REST request and return the decoded JSON body.

        Returns None for 204 responses.

        Raises:
            ConfluenceAPIError: On any non-success status.
            requests.RequestException: On network failures.
        """
        logger.debug("%s %s params=%s", method, url, params)
        response = self.session.request(
            method,
            url,
            params=params,
            json=payload,
            timeout=(10, 60),
        )
        if not response.ok:
            raise ConfluenceAPIError.from_response(response)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _check_page_id(page_id: str) -> str:
        is_valid, error_msg = validate_page_id(page_id)
        if not is_valid:
            raise ValueError(f"Invalid page id: {error_msg}")
        return str(page_id).strip()

    @staticmethod
    def _check_key(key: str) -> None:
        is_valid, error_msg = validate_property_key(key)
        if not is_valid:
            raise ValueError(f"Invalid property key: {error_msg}")

    def validate_connection(self) -> str:
        """
        Validate credentials by fetching the current user.
        Returns the user's display name if successful.
        """
        user = self._request("GET", f"{self.api_v1_url}/user/current")
        return (user or {}).get("displayName", "")

    def search_content(
        self,
        cql: str,
        start: int = 0,
        limit: int = 50,
        expand: str | None = None,
    ) -> dict[str, Any]:
        """
        Run a CQL search through the v1 ``content/search`` endpoint.

        Args:
            cql: CQL query string
            start: Offset of the first result
            limit: Page size
            expand: Comma-separated expansions, e.g. "body.storage,version"

        Returns:
            Raw response dict with keys: results, start, limit, size, _links
        """
        params: dict[str, Any] = {"cql": cql, "start": start, "limit": limit}
        if expand:
            params["expand"] = expand
        return self._request(
            "GET", f"{self.api_v1_url}/content/search", params=params
        )

    def find_property(
        self, page_id: str, key: str
    ) -> dict[str, Any] | None:
        """
        Look a property up by key using the list view.

        The list view's version field is not reliable; use
        ``get_property`` before writing.

        Returns:
            Raw property dict, or None when the page has no such key.
        """
        page_id = self._check_page_id(page_id)
        self._check_key(key)
        data = self._request(
            "GET",
            f"{self.api_v2_url}/pages/{page_id}/properties",
            params={"key": key},
        ) or {}
        results = data.get("results") or []
        return results[0] if results else None

    def get_property(
        self, page_id: str, property_id: str
    ) -> dict[str, Any]:
        """
        Get the full detail of one property, including its version.
        """
        page_id = self._check_page_id(page_id)
        return self._request(
            "GET",
            f"{self.api_v2_url}/pages/{page_id}/properties/{property_id}",
        )

    def create_property(
        self, page_id: str, key: str, value: Any
    ) -> dict[str, Any]:
        """
        Create a property on a page.

        Raises:
            ConfluenceAPIError: If the key already exists or permission is denied
        """
        page_id = self._check_page_id(page_id)
        self._check_key(key)
        return self._request(
            "POST",
            f"{self.api_v2_url}/pages/{page_id}/properties",
            payload={"key": key, "value": value},
        )

    def update_property(
        self,
        page_id: str,
        property_id: str,
        key: str,
        value: Any,
        version: int,
    ) -> dict[str, Any]:
        """
        Update a property with optimistic locking.

        Args:
            page_id: Page the property belongs to
            property_id: Property id from the list or detail view
            key: Property key
            value: New value
            version: New version number (current version + 1)

        Raises:
            VersionConflictError: If the property changed since it was read
            ConfluenceAPIError: For other server errors
        """
        page_id = self._check_page_id(page_id)
        self._check_key(key)
        return self._request(
            "PUT",
            f"{self.api_v2_url}/pages/{page_id}/properties/{property_id}",
            payload={"key": key, "value": value, "version": {"number": version}},
        )

    def delete_property(self, page_id: str, property_id: str) -> bool:
        """
        Delete a property.

        Returns:
            True if successful
        """
        page_id = self._check_page_id(page_id)
        self._request(
            "DELETE",
            f"{self.api_v2_url}/pages/{page_id}/properties/{property_id}",
        )
        return True
