"""
Input validation for values that end up in Confluence request paths.

Each validator returns an ``(is_valid, error_message)`` tuple so callers can
decide whether to raise or report.
"""

import re

_PROPERTY_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._:-]+$")
MAX_PROPERTY_KEY_LENGTH = 255
_SPACE_KEY_PATTERN = re.compile(r"^~?[A-Za-z0-9_]+$")


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Page id")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_page_id(page_id: str) -> tuple[bool, str]:
    """
    Validate a Confluence page id.

    Page ids are numeric strings assigned by Confluence.

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.
    """
    if not page_id or not str(page_id).strip():
        return (
            False,
            format_validation_error("Page id", "cannot be empty"),
        )

    digits = str(page_id).strip()
    if not (digits.isascii() and digits.isdigit()):
        return (
            False,
            format_validation_error("Page id", "must be numeric"),
        )

    return (True, "")


def validate_property_key(key: str) -> tuple[bool, str]:
    """
    Validate a content property key.

    Validation rules:
        - Cannot be empty
        - At most 255 characters
        - Letters, digits, '.', '_', ':' and '-' only (no path separators)
    """
    if not key or not key.strip():
        return (
            False,
            format_validation_error("Property key", "cannot be empty"),
        )

    if len(key) > MAX_PROPERTY_KEY_LENGTH:
        return (
            False,
            format_validation_error(
                "Property key",
                f"exceeds maximum length of {MAX_PROPERTY_KEY_LENGTH} characters",
            ),
        )

    if not _PROPERTY_KEY_PATTERN.match(key):
        return (
            False,
            format_validation_error(
                "Property key", "contains unsupported characters"
            ),
        )

    return (True, "")


def validate_space_key(space_key: str) -> tuple[bool, str]:
    """
    Validate a Confluence space key.

    Space keys are letters, digits and underscores; personal spaces carry
    a leading "~". The key is embedded in a CQL query, so quotes and
    whitespace are rejected.
    """
    if not space_key or not space_key.strip():
        return (
            False,
            format_validation_error("Space key", "cannot be empty"),
        )

    if not _SPACE_KEY_PATTERN.match(space_key.strip()):
        return (
            False,
            format_validation_error(
                "Space key", "contains unsupported characters"
            ),
        )

    return (True, "")
