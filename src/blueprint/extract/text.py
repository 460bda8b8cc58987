"""Line-oriented helpers shared by the extractors.

All patterns are anchored and free of nested quantifiers so that very long
input is processed in linear time.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from blueprint.models.entities import next_id

# --- Patterns ---

# "1. ", "2) ", "- ", "* ", "• "
LIST_MARKER_PATTERN = re.compile(r"^(?:\d{1,3}[.)]|[-*•·])\s+")

# First name/description separator: a colon, or a dash with spaces around it
SEPARATOR_PATTERN = re.compile(r":|\s[-–—]\s")

ITEM_SPLIT_PATTERN = re.compile(r"[,;]")

WHITESPACE_PATTERN = re.compile(r"\s+")


def split_lines(text: str) -> list[str]:
    """Split text into stripped, non-empty lines."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [line.strip() for line in normalized.split("\n") if line.strip()]


def strip_marker(line: str) -> tuple[bool, str]:
    """Remove a leading list marker.

    Returns:
        (had_marker, remaining_text)
    """
    match = LIST_MARKER_PATTERN.match(line)
    if match is None:
        return False, line.strip()
    return True, line[match.end() :].strip()


def split_name_description(text: str) -> tuple[str, str]:
    """Split ``"Name: description"`` or ``"Name - description"``.

    Text without a separator is returned whole as the name.
    """
    match = SEPARATOR_PATTERN.search(text)
    if match is None:
        return text.strip(), ""
    return text[: match.start()].strip(), text[match.end() :].strip()


def split_items(text: str) -> list[str]:
    """Split a comma or semicolon separated list."""
    return [item.strip() for item in ITEM_SPLIT_PATTERN.split(text) if item.strip()]


def normalize_name(name: str) -> str:
    """Case- and whitespace-insensitive key for name matching."""
    return WHITESPACE_PATTERN.sub(" ", name).strip().casefold()


def join_text(first: str, second: str) -> str:
    if not first:
        return second
    if not second:
        return first
    return f"{first} {second}"


class IdAllocator:
    """Hands out ``prefix-N`` ids that are unique within one aggregate."""

    def __init__(self, existing: Iterable[str]) -> None:
        self._existing = list(existing)
        self._last: dict[str, str] = {}

    def allocate(self, prefix: str) -> str:
        previous = self._last.get(prefix)
        used = [previous] if previous else self._existing
        new_id = next_id(prefix, used)
        self._last[prefix] = new_id
        return new_id
