"""
Module: partition.manager

Purpose:
    Maintain the difficulty partition: an ordered tuple of DifficultyRange
    whose spans [previous.to + 1, to] exactly cover [1, total] with no gap
    and no overlap. Every operation is a pure function returning a new
    tuple; the input is never modified.

Key Functions:
    - reconcile(): Re-fit the partition after the question total changes
    - split(): Halve the last range
    - remove(): Drop a range, the final range absorbing the freed span
    - set_boundary(): Move a non-final range's upper bound
    - set_difficulty(): Relabel a range
    - difficulty_for(): Difficulty of a 1-based question ordinal
    - to_bands(): Explicit start/end view

Dependencies:
    - core.models.ranges: DifficultyRange, DifficultyBand
    - core.models.difficulty: Difficulty

Used By:
    - session.controller: All range edits and count changes
    - generation.prompts: Difficulty distribution lines
    - cli: --band / --split options
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence, Tuple

from exam_toolkit.core.models.difficulty import Difficulty
from exam_toolkit.core.models.ranges import DifficultyBand, DifficultyRange

logger = logging.getLogger(__name__)

Partition = Tuple[DifficultyRange, ...]


# ─────────────────────────────────────────────────────────────────────────────
# Queries
# ─────────────────────────────────────────────────────────────────────────────

def default_partition(total: int) -> Partition:
    """Single medium range covering [1, total]; empty when total is 0."""
    if total < 0:
        raise ValueError(f"total must be non-negative: {total}")
    if total == 0:
        return ()
    return (DifficultyRange.create(total),)


def total_of(ranges: Sequence[DifficultyRange]) -> int:
    """Question total covered by a valid partition (0 when empty)."""
    return ranges[-1].to if ranges else 0


def iter_spans(ranges: Sequence[DifficultyRange]) -> Iterator[Tuple[int, DifficultyRange]]:
    """Yield (lower_bound, range) pairs; the lower bound is implicit."""
    lower = 1
    for r in ranges:
        yield lower, r
        lower = r.to + 1


def lower_bounds(ranges: Sequence[DifficultyRange]) -> Tuple[int, ...]:
    return tuple(lower for lower, _ in iter_spans(ranges))


def is_valid(total: int, ranges: Sequence[DifficultyRange]) -> bool:
    """
    Check that ranges partition [1, total] exactly.

    Holds when every range is non-empty, upper bounds strictly increase,
    the last upper bound equals total, and total == 0 iff ranges is empty.
    """
    if total == 0:
        return len(ranges) == 0
    if not ranges:
        return False
    previous = 0
    for r in ranges:
        if r.to <= previous:
            return False
        previous = r.to
    return previous == total


def to_bands(ranges: Sequence[DifficultyRange]) -> Tuple[DifficultyBand, ...]:
    """
    Explicit [start, end] bands for prompts and display.

    Example:
        >>> [(b.start, b.end) for b in to_bands(ranges)]
        [(1, 3), (4, 5)]
    """
    return tuple(
        DifficultyBand(start=lower, end=r.to, difficulty=r.difficulty)
        for lower, r in iter_spans(ranges)
    )


def difficulty_for(ordinal: int, ranges: Sequence[DifficultyRange]) -> Difficulty:
    """
    Difficulty of the question at a 1-based ordinal.

    The first range containing the ordinal wins. Falls back to the default
    difficulty when no range contains it.
    """
    for lower, r in iter_spans(ranges):
        if lower <= ordinal <= r.to:
            return r.difficulty
    logger.warning(f"No difficulty range contains question {ordinal}; using default")
    return Difficulty.default()


def _index_of(ranges: Sequence[DifficultyRange], range_id: str) -> Optional[int]:
    for i, r in enumerate(ranges):
        if r.id == range_id:
            return i
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Transformations
# ─────────────────────────────────────────────────────────────────────────────

def reconcile(total: int, ranges: Sequence[DifficultyRange]) -> Partition:
    """
    Re-fit a partition to a new question total.

    Walks the ranges with a running lower bound starting at 1. Ranges that
    fall entirely below the lower bound are dropped, upper bounds are
    clamped to total, and the walk stops once total is covered. If the
    surviving ranges stop short of total, the last one is extended; if
    none survive, a single medium range is created. Surviving ranges keep
    their ids and labels.

    Args:
        total: New question total (mcq_count + essay_count)
        ranges: Current partition (need not be valid)

    Returns:
        Valid partition of [1, total]; empty when total is 0

    Raises:
        ValueError: If total is negative

    Example:
        >>> r = reconcile(8, (DifficultyRange("a", 3, Difficulty.EASY),
        ...                   DifficultyRange("b", 5, Difficulty.HARD)))
        >>> [(x.id, x.to) for x in r]
        [('a', 3), ('b', 8)]
    """
    if total < 0:
        raise ValueError(f"total must be non-negative: {total}")
    if total == 0:
        return ()

    result = []
    current_end = 0
    for r in ranges:
        lower = current_end + 1
        if lower > total:
            break
        if r.to < lower:
            continue
        new_to = min(r.to, total)
        result.append(r if r.to == new_to else r.with_to(new_to))
        current_end = new_to
        if current_end == total:
            break

    if current_end < total:
        if result:
            result[-1] = result[-1].with_to(total)
        else:
            result.append(DifficultyRange.create(total))

    return tuple(result)


def split(ranges: Sequence[DifficultyRange]) -> Partition:
    """
    Split the last range at its midpoint.

    The last range keeps its id and shrinks to floor(lower + (to - lower) / 2);
    a new range with a fresh id covers the remainder and inherits the
    difficulty. No-op when there are no ranges or the last range spans a
    single question.

    Example:
        >>> [r.to for r in split(default_partition(5))]
        [3, 5]
    """
    ranges = tuple(ranges)
    if not ranges:
        return ranges
    last = ranges[-1]
    lower = ranges[-2].to + 1 if len(ranges) > 1 else 1
    if last.to <= lower:
        return ranges
    midpoint = lower + (last.to - lower) // 2
    logger.debug(f"Splitting range {last.id} [{lower}, {last.to}] at {midpoint}")
    return ranges[:-1] + (
        last.with_to(midpoint),
        DifficultyRange.create(last.to, last.difficulty),
    )


def remove(ranges: Sequence[DifficultyRange], range_id: str) -> Partition:
    """
    Remove a range; the new final range is extended to the total.

    No-op when only one range remains or the id is unknown, so a non-empty
    partition never becomes empty.
    """
    ranges = tuple(ranges)
    if len(ranges) <= 1:
        return ranges
    index = _index_of(ranges, range_id)
    if index is None:
        return ranges
    total = ranges[-1].to
    kept = ranges[:index] + ranges[index + 1:]
    logger.debug(f"Removed range {range_id}; {len(kept)} ranges remain")
    return kept[:-1] + (kept[-1].with_to(total),)


def set_boundary(ranges: Sequence[DifficultyRange], range_id: str, new_to: int) -> Partition:
    """
    Move a range's upper bound.

    The final range's bound always equals the total, so editing it is a
    no-op. For any other range, new_to is clamped to
    [lower bound, next range's bound - 1], keeping every range non-empty
    and the partition valid after the call. Unknown ids are a no-op.
    """
    ranges = tuple(ranges)
    index = _index_of(ranges, range_id)
    if index is None or index == len(ranges) - 1:
        return ranges
    lower = ranges[index - 1].to + 1 if index > 0 else 1
    upper = ranges[index + 1].to - 1
    clamped = max(lower, min(int(new_to), upper))
    if clamped != new_to:
        logger.debug(f"Boundary {new_to} for range {range_id} clamped to {clamped}")
    target = ranges[index]
    if clamped == target.to:
        return ranges
    return ranges[:index] + (target.with_to(clamped),) + ranges[index + 1:]


def set_difficulty(
    ranges: Sequence[DifficultyRange],
    range_id: str,
    difficulty: Difficulty | str,
) -> Partition:
    """Relabel one range; bounds are untouched. Unknown ids are a no-op."""
    ranges = tuple(ranges)
    index = _index_of(ranges, range_id)
    if index is None:
        return ranges
    return ranges[:index] + (ranges[index].with_difficulty(difficulty),) + ranges[index + 1:]
