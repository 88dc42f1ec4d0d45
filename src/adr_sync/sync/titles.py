"""ADR title handling: which pages count as ADRs, and their numbers."""

from __future__ import annotations

import re
from dataclasses import dataclass

from adr_sync.config_schema import AdrConfig

_NUMBER = re.compile(r"ADR-(\d+)")
_DIGITS = re.compile(r"\d+")
_LEADING_SYMBOLS = re.compile(r"^[^\w\[]*")
_PREFIX_WITH_SEPARATOR = re.compile(r"^\[?ADR-\d+\]?\s*[:/-]\s*")
_PREFIX_BARE = re.compile(r"^\[?ADR-\d+\]?\s+")


@dataclass(frozen=True)
class TitleFilter:
    """Compiled title rules, built once per run.

    A title is an ADR when it contains ``include`` and matches none of
    ``exclude`` (reserved number ranges, design review meeting notes).
    """

    include: re.Pattern[str]
    exclude: tuple[re.Pattern[str], ...]

    @classmethod
    def from_config(cls, profile: AdrConfig) -> TitleFilter:
        return cls(
            include=re.compile(profile.title_pattern),
            exclude=tuple(
                re.compile(p, re.IGNORECASE) for p in profile.exclude_patterns
            ),
        )

    def is_adr(self, title: str) -> bool:
        if not self.include.search(title):
            return False
        return not any(p.search(title) for p in self.exclude)

    def number(self, title: str) -> int:
        """Sequence number of *title* under the include pattern.

        The first capture group of ``include`` wins when it holds digits,
        then the first run of digits in the matched text. Titles the
        pattern does not number fall back to ``adr_number``.
        """
        match = self.include.search(title)
        if match:
            if match.re.groups and (match.group(1) or "").isdigit():
                return int(match.group(1))
            digits = _DIGITS.search(match.group(0))
            if digits:
                return int(digits.group(0))
        return adr_number(title)


def adr_number(title: str) -> int:
    """Sequence number embedded in *title*, or -1 when there is none."""
    match = _NUMBER.search(title)
    return int(match.group(1)) if match else -1


def adr_id(number: int) -> str:
    """Display id, zero-padded to three digits: ``ADR-007``.

    Unnumbered titles (negative *number*) have no id and give ``"N/A"``.
    """
    if number < 0:
        return "N/A"
    return f"ADR-{number:03d}"


def short_title(title: str) -> str:
    """Strip a leading emoji and the ``ADR-NNN:`` prefix from *title*."""
    text = _LEADING_SYMBOLS.sub("", title)
    text = _PREFIX_WITH_SEPARATOR.sub("", text)
    text = _PREFIX_BARE.sub("", text)
    return text.strip()
