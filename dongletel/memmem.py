"""Byte string search."""

from __future__ import annotations

__all__ = ["memmem"]


def memmem(haystack: bytes, needle: bytes) -> int:
    """Return the offset of the first ``needle`` in ``haystack``, or -1.

    Unlike ``bytes.find``, an empty haystack or an empty needle never matches.
    """
    if not haystack or not needle or len(haystack) < len(needle):
        return -1
    return bytes(haystack).find(bytes(needle))