"""Keep ADR status indicators on Confluence pages in sync with page content."""

__version__ = "0.3.0"
