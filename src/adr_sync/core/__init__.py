"""Confluence REST client shared by the sync engine and the CLI."""

from .client import ConfluenceAPIError, ConfluenceClient, VersionConflictError

__all__ = ["ConfluenceAPIError", "ConfluenceClient", "VersionConflictError"]
