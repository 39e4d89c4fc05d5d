"""
First-occurrence deduplication for parsed items.

Responsibility: Collapse repeated agenda or listing entries by natural key
"""

from __future__ import annotations

from typing import Callable, Hashable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def dedupe_by_key(
    records: Iterable[T],
    key_fn: Callable[[T], Optional[Hashable]],
) -> Tuple[List[T], int]:
    """
    Keep the first record for each key, in input order.

    A record whose key is None has no identity and is dropped; it is not
    counted as a duplicate.

    Returns:
        (kept records, number of repeats skipped)
    """
    kept: List[T] = []
    keys = set()
    repeats = 0

    for record in records:
        key = key_fn(record)
        if key is None:
            continue
        if key in keys:
            repeats += 1
        else:
            keys.add(key)
            kept.append(record)

    return kept, repeats
