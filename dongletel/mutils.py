"""Small helpers for mapping between enumeration values and their names."""

from __future__ import annotations

from collections.abc import Sequence

__all__ = ["enum2str", "str2enum"]


def enum2str(value: int, names: Sequence[str], default: str = "unknown") -> str:
    """Return the name stored at ``value`` in ``names``, or ``default`` if out of range."""
    if 0 <= value < len(names):
        return names[value]
    return default


def str2enum(value: str, options: Sequence[str]) -> int | None:
    """Return the index of the first option equal to ``value`` ignoring case, or None."""
    wanted = value.casefold()
    return next(
        (index for index, option in enumerate(options) if option.casefold() == wanted),
        None,
    )