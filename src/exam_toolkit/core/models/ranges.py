"""
Module: ranges

Purpose:
    Provides DifficultyRange, one entry of the difficulty partition. A
    range stores only its inclusive upper bound; the lower bound is the
    previous range's upper bound + 1 (or 1 for the first range), so the
    ranges of a partition can never overlap or leave gaps between them.

Key Classes:
    - DifficultyRange: Stable id, upper bound and difficulty label
    - DifficultyBand: Explicit start/end view used in prompts and display

Dependencies:
    - dataclasses (std)
    - uuid (std)
    - .difficulty.Difficulty

Used By:
    - partition.manager
    - generation.prompts
    - session.controller
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace

from .difficulty import Difficulty


def new_range_id() -> str:
    """Mint a fresh range id; ids are never reused."""
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class DifficultyRange:
    """
    One band of the difficulty partition (immutable).

    Attributes:
        id: Opaque identifier assigned at creation, stable across edits
        to: Inclusive upper bound (1-based question ordinal)
        difficulty: Label applied to every ordinal in the band

    Invariants:
        - to >= 1
        - id is non-empty

    Example:
        >>> r = DifficultyRange.create(5)
        >>> r.difficulty
        <Difficulty.MEDIUM: 'medium'>
        >>> r.with_to(3).id == r.id
        True
    """

    id: str
    to: int
    difficulty: Difficulty = Difficulty.MEDIUM

    def __post_init__(self) -> None:
        """Validate range on construction."""
        if not self.id:
            raise ValueError("Range id cannot be empty")
        if self.to < 1:
            raise ValueError(f"Range upper bound must be >= 1: {self.to}")
        if not isinstance(self.difficulty, Difficulty):
            object.__setattr__(self, "difficulty", Difficulty.parse(self.difficulty))

    @classmethod
    def create(cls, to: int, difficulty: Difficulty = Difficulty.MEDIUM) -> DifficultyRange:
        """Create a range with a newly minted id."""
        return cls(id=new_range_id(), to=to, difficulty=difficulty)

    def with_to(self, to: int) -> DifficultyRange:
        """Copy with a new upper bound, keeping id and difficulty."""
        return replace(self, to=to)

    def with_difficulty(self, difficulty: Difficulty) -> DifficultyRange:
        """Copy with a new label, keeping id and bound."""
        return replace(self, difficulty=Difficulty.parse(difficulty))

    def to_dict(self) -> dict:
        return {"id": self.id, "to": self.to, "difficulty": self.difficulty.value}

    @classmethod
    def from_dict(cls, data: dict) -> DifficultyRange:
        return cls(
            id=data["id"],
            to=int(data["to"]),
            difficulty=Difficulty.parse(data.get("difficulty", Difficulty.default())),
        )


@dataclass(frozen=True, slots=True)
class DifficultyBand:
    """
    Explicit [start, end] view of a range.

    Attributes:
        start: First ordinal in the band (inclusive)
        end: Last ordinal in the band (inclusive)
        difficulty: Label of the band
    """

    start: int
    end: int
    difficulty: Difficulty

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError(f"Band start must be >= 1: {self.start}")
        if self.end < self.start:
            raise ValueError(f"Band end ({self.end}) before start ({self.start})")

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def contains(self, ordinal: int) -> bool:
        return self.start <= ordinal <= self.end

    def to_dict(self) -> dict:
        return {"from": self.start, "to": self.end, "difficulty": self.difficulty.value}
