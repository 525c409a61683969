# src/tictac/board/positions.py

"""
Fractional positions for manually ordered lists (kanban columns, project sidebar).

Items are sorted by (position, id). New items go to the end with a gap of
POSITION_STEP; drops between two neighbours take the midpoint, so existing
siblings never need rewriting. Repeated midpoints shrink the gap, which is
what needs_renumber()/renumber() are for.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

POSITION_STEP = 1000.0
DEFAULT_EPSILON = 1e-6


def append_position(existing_positions: Iterable[float]) -> float:
    """Position for an item added after every existing one."""
    return max(existing_positions, default=0.0) + POSITION_STEP


def insert_between(prev: float | None, next: float | None) -> float:
    """
    Position for an item dropped between prev and next.

    Either neighbour may be None (head/tail of the list, or an empty list).
    """
    if prev is not None and next is not None:
        return (prev + next) / 2
    if next is not None:
        return next / 2
    if prev is not None:
        return prev + POSITION_STEP
    return POSITION_STEP


def needs_renumber(positions_in_order: Sequence[float], epsilon: float = DEFAULT_EPSILON) -> bool:
    """True when two adjacent positions are closer than epsilon (or equal)."""
    return any(b - a < epsilon for a, b in zip(positions_in_order, positions_in_order[1:]))


def renumber(count: int) -> list[float]:
    """Fresh evenly spaced positions: 1000, 2000, ..."""
    return [(i + 1) * POSITION_STEP for i in range(count)]
