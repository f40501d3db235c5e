"""Least-Loaded Selection — pick the handler with the fewest active assignments.

Invariants:
    - Strictly smallest count wins
    - Ties resolve to the first candidate in enumeration order (stable, never random)
    - Empty candidate list returns None (assignment stays unset, not an error)
"""

from typing import Sequence, TypeVar

T = TypeVar("T")


def pick_least_loaded(candidates: Sequence[tuple[T, int]]) -> T | None:
    """Return the key of the first candidate with the minimum load."""
    best: T | None = None
    best_load: int | None = None
    for key, load in candidates:
        if best_load is None or load < best_load:
            best, best_load = key, load
    return best
