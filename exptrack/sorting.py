"""In-place partition sort shared by every table type.

``quicksort`` sorts ``items[start:stop]`` with a three-way ``cmp(a, b)``
comparator (negative, zero, positive), leaving the rest of the list untouched.
Partitioning follows the Lomuto scheme around the element in the last slot of
the range. Before each partition the median of the first, middle and last
elements is moved into that slot so already-sorted input (the common case for
a date-ordered expense file) does not degrade to quadratic time.

The sort is not stable. Recursion only descends into the smaller partition;
the larger one is handled by the loop, which bounds stack depth at
``O(log n)``.
"""

from __future__ import annotations

from collections.abc import Callable, MutableSequence
from typing import TypeVar

T = TypeVar("T")

type Comparator[T] = Callable[[T, T], int]


def _median_to_last(items: MutableSequence[T], lo: int, hi: int, cmp: Comparator[T]) -> None:
    mid = (lo + hi) // 2
    a, b, c = items[lo], items[mid], items[hi]
    if cmp(a, b) < 0:
        if cmp(b, c) < 0:
            median = mid
        elif cmp(a, c) < 0:
            median = hi
        else:
            median = lo
    else:
        if cmp(a, c) < 0:
            median = lo
        elif cmp(b, c) < 0:
            median = hi
        else:
            median = mid
    if median != hi:
        items[median], items[hi] = items[hi], items[median]


def partition(items: MutableSequence[T], lo: int, hi: int, cmp: Comparator[T]) -> int:
    """Lomuto partition of ``items[lo..hi]`` (inclusive) around ``items[hi]``.

    Returns the final index of the pivot.
    """

    pivot = items[hi]
    store = lo
    for i in range(lo, hi):
        if cmp(items[i], pivot) < 0:
            items[store], items[i] = items[i], items[store]
            store += 1
    items[store], items[hi] = items[hi], items[store]
    return store


def quicksort(
    items: MutableSequence[T],
    cmp: Comparator[T],
    start: int = 0,
    stop: int | None = None,
) -> None:
    """Sort ``items[start:stop]`` in place using ``cmp``."""

    if stop is None:
        stop = len(items)
    if start < 0 or stop > len(items):
        raise IndexError(f"sort range [{start}, {stop}) outside of 0..{len(items)}")
    _quicksort(items, start, stop - 1, cmp)


def _quicksort(items: MutableSequence[T], lo: int, hi: int, cmp: Comparator[T]) -> None:
    while lo < hi:
        if hi - lo >= 2:
            _median_to_last(items, lo, hi, cmp)
        p = partition(items, lo, hi, cmp)
        if p - lo < hi - p:
            _quicksort(items, lo, p - 1, cmp)
            lo = p + 1
        else:
            _quicksort(items, p + 1, hi, cmp)
            hi = p - 1


__all__ = ["Comparator", "partition", "quicksort"]
