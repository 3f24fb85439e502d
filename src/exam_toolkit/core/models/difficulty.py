"""
Module: difficulty

Purpose:
    Difficulty labels attached to ranges of question ordinals, with the
    instruction text the generator uses to describe each level.

Key Classes:
    - Difficulty: easy / medium / hard
"""

from __future__ import annotations

from enum import Enum


class Difficulty(str, Enum):
    """Difficulty label for a band of questions."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def default(cls) -> Difficulty:
        """Label used for ranges created without an explicit choice."""
        return cls.MEDIUM

    @classmethod
    def parse(cls, value: str | Difficulty) -> Difficulty:
        """
        Parse a label case-insensitively.

        Raises:
            ValueError: If the label is unknown
        """
        if isinstance(value, Difficulty):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Invalid difficulty: {value!r}") from None

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def instruction(self) -> str:
        """Prompt guidance describing what this level should test."""
        return _INSTRUCTIONS[self]


_INSTRUCTIONS = {
    Difficulty.EASY: "recall of facts stated explicitly in the material",
    Difficulty.MEDIUM: "comprehension and inference beyond literal recall",
    Difficulty.HARD: "analysis, synthesis or evaluation requiring critical thinking",
}
