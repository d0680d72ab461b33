"""Case-insensitive, numeric-aware ordering for file names."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_DIGITS = re.compile(r"(\d+)")


def natural_sort_key(value: str) -> tuple[Any, ...]:
    """Key for natural sorting: ``"2.jpg"`` sorts before ``"10.jpg"``.

    Text chunks compare case-insensitively. Numeric chunks compare by value,
    then by their original width so ``"01"`` and ``"1"`` still have a stable
    order. Every chunk is tagged so digits and text never compare directly.
    """

    parts: list[tuple[int, Any, Any]] = []
    # split() with a capturing group puts the digit runs at odd indices.
    for index, chunk in enumerate(_DIGITS.split(str(value).casefold())):
        if not chunk:
            continue
        if index % 2:
            parts.append((0, int(chunk), len(chunk)))
        else:
            parts.append((1, chunk, ""))
    return tuple(parts)


def natural_sorted(
    items: Iterable[T], *, key: Optional[Callable[[T], str]] = None
) -> List[T]:
    """Return ``items`` in natural order of ``key(item)`` (the item itself by default)."""

    if key is None:
        return sorted(items, key=lambda item: natural_sort_key(str(item)))
    return sorted(items, key=lambda item: natural_sort_key(key(item)))


__all__ = ["natural_sort_key", "natural_sorted"]
