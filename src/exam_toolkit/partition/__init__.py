"""
Partition Package

Difficulty-range partition manager: pure functions keeping an ordered
sequence of difficulty ranges an exact cover of [1, total].
"""

from .manager import (
    Partition,
    default_partition,
    difficulty_for,
    is_valid,
    lower_bounds,
    reconcile,
    remove,
    set_boundary,
    set_difficulty,
    split,
    to_bands,
    total_of,
)

__all__ = [
    "Partition",
    "default_partition",
    "difficulty_for",
    "is_valid",
    "lower_bounds",
    "reconcile",
    "remove",
    "set_boundary",
    "set_difficulty",
    "split",
    "to_bands",
    "total_of",
]
