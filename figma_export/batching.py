"""Split identifier lists into request-sized batches."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

from .config import DEFAULT_CHUNK_SIZE

T = TypeVar("T")


def chunked(items: Sequence[T], chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[List[T]]:
    """Return ``items`` as ordered consecutive batches of at most ``chunk_size``."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    return [
        list(items[start : start + chunk_size])
        for start in range(0, len(items), chunk_size)
    ]
