"""Shared pytest fixtures for adr-sync tests."""

from __future__ import annotations

import pytest
from dotenv import load_dotenv

from adr_sync.config import Config
from adr_sync.config_schema import AdrConfig

from helpers import FakeConfluenceClient

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live Confluence site",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live Confluence site"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        site="example.atlassian.net",
        email="dev@example.com",
        api_token="secret-token",
        insecure=False,
    )


@pytest.fixture
def profile():
    return AdrConfig(space_key="CE", parent_page_id="31859277900")


@pytest.fixture
def fake_client():
    return FakeConfluenceClient()
