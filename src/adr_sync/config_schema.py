"""Unified configuration schema for adr_sync.

Defines Pydantic models for the unified config structure with dedicated
sections for the Confluence connection, the ADR collection and logging.

Usage:
    from adr_sync.config_schema import build_config, resolve_adr_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    profile = resolve_adr_config(unified, cli_overrides={"space_key": "ENG"})
"""

from __future__ import annotations

import logging
import os
import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .validators import validate_page_id, validate_space_key

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_KEYS = ("emoji-title-published", "emoji-title-draft")


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ConfluenceConfig(BaseModel):
    """Confluence connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    site: str | None = Field(
        default=None, description="Confluence site, e.g. example.atlassian.net"
    )
    email: str | None = Field(default=None, description="Account email")
    api_token: str | None = Field(default=None, description="API token")
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class AdrConfig(BaseModel):
    """Where the ADRs live and how their indicators are written.

    Attributes:
        space_key: Confluence space holding the ADR tree.
        parent_page_id: Page id of the ADR parent page.
        page_size: Results requested per search page.
        title_pattern: Regex a title must contain to count as an ADR.
        exclude_patterns: Case-insensitive regexes for reserved ranges,
            meeting notes and similar non-ADR children.
        property_keys: Content properties that carry the indicator.
        property_value: ``code`` writes the indicator code, ``codepoint``
            writes the emoji's hex code point.
    """

    space_key: str | None = Field(default=None, description="Space key")
    parent_page_id: str | None = Field(
        default=None, description="ADR parent page id"
    )
    page_size: int = Field(
        default=50,
        ge=1,
        le=250,
        description="Search page size (1-250)",
    )
    title_pattern: str = Field(default=r"ADR-\d+")
    exclude_patterns: tuple[str, ...] = Field(
        default=("Reserved", "Design Review")
    )
    property_keys: tuple[str, ...] = Field(default=DEFAULT_PROPERTY_KEYS)
    property_value: Literal["code", "codepoint"] = "code"

    model_config = {"frozen": True}

    @field_validator("parent_page_id", mode="before")
    @classmethod
    def _coerce_page_id(cls, value):
        # YAML reads an unquoted page id as an int
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("parent_page_id")
    @classmethod
    def _check_page_id(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        is_valid, error_msg = validate_page_id(value)
        if not is_valid:
            raise ValueError(f"invalid parent_page_id {value!r}: {error_msg}")
        return value.strip()

    @field_validator("space_key")
    @classmethod
    def _check_space_key(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        is_valid, error_msg = validate_space_key(value)
        if not is_valid:
            raise ValueError(f"invalid space_key {value!r}: {error_msg}")
        return value.strip()

    @field_validator("title_pattern")
    @classmethod
    def _check_title_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid title_pattern {value!r}: {exc}") from exc
        return value

    @field_validator("exclude_patterns")
    @classmethod
    def _check_exclude_patterns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(
                    f"invalid exclude pattern {pattern!r}: {exc}"
                ) from exc
        return value

    @field_validator("property_keys")
    @classmethod
    def _check_property_keys(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("property_keys must name at least one property")
        if len(set(value)) != len(value):
            raise ValueError("property_keys must not repeat a key")
        return value


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="WARNING", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` is always
    valid.
    """

    confluence: ConfluenceConfig = Field(default_factory=ConfluenceConfig)
    adr: AdrConfig = Field(default_factory=AdrConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def resolve_adr_config(
    unified: UnifiedConfig,
    cli_overrides: dict | None = None,
) -> AdrConfig:
    """Apply env vars and CLI overrides to the ``adr`` section.

    Precedence: CLI override > env var > YAML value.

    CLI overrides dict keys: space_key, parent_page_id.

    Raises:
        ValueError: If space key or parent page id is still unset, or
            ``ADR_PAGE_SIZE`` is not a number in range.
    """
    overrides = cli_overrides or {}
    adr = unified.adr
    update: dict = {}

    space_key = (
        overrides.get("space_key")
        or os.getenv("ADR_SPACE_KEY")
        or adr.space_key
    )
    if not space_key or not space_key.strip():
        raise ValueError(
            "ADR space key not found. Set ADR_SPACE_KEY environment variable, "
            "pass --space CLI argument, or add 'adr.space_key' to config.yml."
        )
    update["space_key"] = space_key.strip()

    parent_page_id = (
        overrides.get("parent_page_id")
        or os.getenv("ADR_PARENT_PAGE_ID")
        or adr.parent_page_id
    )
    if not parent_page_id or not str(parent_page_id).strip():
        raise ValueError(
            "ADR parent page id not found. Set ADR_PARENT_PAGE_ID environment "
            "variable, pass --parent-id CLI argument, or add "
            "'adr.parent_page_id' to config.yml."
        )
    update["parent_page_id"] = str(parent_page_id).strip()

    page_size_raw = os.getenv("ADR_PAGE_SIZE")
    if page_size_raw is not None:
        try:
            page_size = int(page_size_raw)
        except ValueError:
            raise ValueError(
                f"Invalid ADR_PAGE_SIZE '{page_size_raw}': must be a number between 1 and 250"
            ) from None
        if not (1 <= page_size <= 250):
            raise ValueError(
                f"Invalid ADR_PAGE_SIZE '{page_size_raw}': must be a number between 1 and 250"
            )
        update["page_size"] = page_size

    # model_copy skips validation; rebuild so overrides are checked too
    return AdrConfig.model_validate({**adr.model_dump(), **update})
