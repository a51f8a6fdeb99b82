"""Utility helpers for file names and Figma URLs."""

from __future__ import annotations

import re
from typing import Optional

ILLEGAL_PATTERN = re.compile(r'[/?<>\\:*|"]')
CONTROL_PATTERN = re.compile(r"[\x00-\x1f\x80-\x9f]")
RESERVED_PATTERN = re.compile(r"^\.+$")
WINDOWS_RESERVED_PATTERN = re.compile(
    r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE
)
WINDOWS_TRAILING_PATTERN = re.compile(r"[. ]+$")
FILE_KEY_PATTERN = re.compile(r"(?:file|design)/([a-z0-9]+)/", re.IGNORECASE)

MAX_FILENAME_BYTES = 255


def _truncate_utf8(value: str, limit: int) -> str:
    encoded = value.encode("utf-8")
    if len(encoded) <= limit:
        return value
    return encoded[:limit].decode("utf-8", "ignore")


def sanitize_filename(name: str, replacement: str = "") -> str:
    """Strip characters that are not allowed in file names on common platforms."""
    sanitized = ILLEGAL_PATTERN.sub(replacement, name)
    sanitized = CONTROL_PATTERN.sub(replacement, sanitized)
    sanitized = RESERVED_PATTERN.sub(replacement, sanitized)
    sanitized = WINDOWS_RESERVED_PATTERN.sub(replacement, sanitized)
    sanitized = WINDOWS_TRAILING_PATTERN.sub(replacement, sanitized)
    return _truncate_utf8(sanitized, MAX_FILENAME_BYTES)


def component_filename(name: str, image_format: str) -> str:
    """Build the on-disk file name for a component rendered as ``image_format``."""
    return f"{sanitize_filename(name).lower()}.{image_format}"


def extract_file_key(url: str) -> Optional[str]:
    """Return the file key from a Figma file URL, or ``None`` if there is none."""
    match = FILE_KEY_PATTERN.search(url or "")
    if not match:
        return None
    return match.group(1)
