"""
Module: exam

Purpose:
    ExamSet - the ordered result of a generation: all multiple-choice
    questions first, then all essays. Numbering is derived from position,
    never stored, so an essay's ordinal is always mcq_count + index + 1.

Key Functions:
    - ExamSet.ordinal_of(question_id): 1-based position in the exam
    - ExamSet.replace(question): Keyed, order-preserving replacement
    - ExamSet.numbered(): Iterate (ordinal, question) pairs

Dependencies:
    - .questions

Used By:
    - session.controller
    - export.pdf
    - cli
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Optional, Tuple

from .questions import (
    EssayQuestion,
    MultipleChoiceQuestion,
    Question,
)


@dataclass(frozen=True)
class ExamSet:
    """
    Generated exam (immutable).

    Attributes:
        mcqs: Multiple-choice questions in display order
        essays: Essay questions in display order

    Invariants:
        - Question ids are unique across both sequences

    Example:
        >>> exam = ExamSet(mcqs=(mcq,), essays=(essay,))
        >>> exam.ordinal_of(essay.id)
        2
    """

    mcqs: Tuple[MultipleChoiceQuestion, ...] = ()
    essays: Tuple[EssayQuestion, ...] = ()

    def __post_init__(self) -> None:
        """Validate exam on construction."""
        object.__setattr__(self, "mcqs", tuple(self.mcqs))
        object.__setattr__(self, "essays", tuple(self.essays))
        for q in self.mcqs:
            if not isinstance(q, MultipleChoiceQuestion):
                raise ValueError(f"mcqs may only hold multiple-choice questions: {q!r}")
        for q in self.essays:
            if not isinstance(q, EssayQuestion):
                raise ValueError(f"essays may only hold essay questions: {q!r}")
        ids = [q.id for q in self.mcqs] + [q.id for q in self.essays]
        if len(ids) != len(set(ids)):
            raise ValueError("Question ids must be unique within an exam")

    # ─────────────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def total(self) -> int:
        return len(self.mcqs) + len(self.essays)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def __iter__(self) -> Iterator[Question]:
        yield from self.mcqs
        yield from self.essays

    def numbered(self) -> Iterator[Tuple[int, Question]]:
        """Yield (ordinal, question) in exam order, ordinals from 1."""
        return enumerate(self, start=1)

    def find(self, question_id: str) -> Optional[Question]:
        for q in self:
            if q.id == question_id:
                return q
        return None

    def ordinal_of(self, question_id: str) -> int:
        """
        1-based position of a question in the exam.

        Multiple-choice index i maps to i + 1; essay index j maps to
        len(mcqs) + j + 1. Positions come from this exam rather than the
        form counts, which may have changed since it was generated.

        Raises:
            KeyError: If the id is not part of this exam
        """
        for i, q in enumerate(self.mcqs):
            if q.id == question_id:
                return i + 1
        for j, q in enumerate(self.essays):
            if q.id == question_id:
                return len(self.mcqs) + j + 1
        raise KeyError(question_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Updates
    # ─────────────────────────────────────────────────────────────────────────

    def replace(self, question: Question) -> ExamSet:
        """
        Return a copy with the question of the same id replaced.

        Order and all other questions are untouched.

        Raises:
            KeyError: If no question has this id
            ValueError: If the replacement is a different variant
        """
        existing = self.find(question.id)
        if existing is None:
            raise KeyError(question.id)
        if existing.kind is not question.kind:
            raise ValueError(
                f"Question {question.id} is {existing.kind}, replacement is {question.kind}"
            )
        if isinstance(question, MultipleChoiceQuestion):
            return replace(self, mcqs=_replace_in(self.mcqs, question))
        return replace(self, essays=_replace_in(self.essays, question))

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "mcqs": [q.to_dict() for q in self.mcqs],
            "essays": [q.to_dict() for q in self.essays],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ExamSet:
        return cls(
            mcqs=tuple(MultipleChoiceQuestion.from_dict(d) for d in data.get("mcqs", [])),
            essays=tuple(EssayQuestion.from_dict(d) for d in data.get("essays", [])),
        )


def _replace_in(items: tuple, question: Question) -> tuple:
    for i, existing in enumerate(items):
        if existing.id == question.id:
            return items[:i] + (question,) + items[i + 1:]
    raise KeyError(question.id)
