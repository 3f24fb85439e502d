"""
Module: questions

Purpose:
    Generated exam questions. A question is either multiple-choice (five
    options, one correct letter) or essay (free-text answer guideline).
    Both variants carry a stable id that never changes once assigned, so
    edits and regenerations replace content without moving the question.

Key Functions:
    - new_question_id(): Mint a question id
    - question_from_dict(): Build the right variant from a dict

Key Classes:
    - QuestionKind: multiple_choice / essay
    - MultipleChoiceQuestion
    - EssayQuestion

Dependencies:
    - dataclasses (std)
    - uuid (std)

Used By:
    - core.models.exam.ExamSet
    - generation.client
    - session.controller
    - export.pdf
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple, Union


OPTION_LETTERS: Tuple[str, ...] = ("A", "B", "C", "D", "E")
OPTION_COUNT = len(OPTION_LETTERS)


def new_question_id() -> str:
    """Mint a fresh question id."""
    return uuid.uuid4().hex


class QuestionKind(str, Enum):
    """Question variant."""
    MULTIPLE_CHOICE = "multiple_choice"
    ESSAY = "essay"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class MultipleChoiceQuestion:
    """
    Multiple-choice question with exactly five options (immutable).

    Attributes:
        id: Stable question id
        prompt_text: Question stem
        options: Five option texts, in display order A-E
        correct_option: Letter of the correct option (A-E)

    Example:
        >>> q = MultipleChoiceQuestion(
        ...     id="q1", prompt_text="2 + 2 = ?",
        ...     options=("1", "2", "3", "4", "5"), correct_option="D",
        ... )
        >>> q.correct_text
        '4'
    """

    id: str
    prompt_text: str
    options: Tuple[str, ...]
    correct_option: str

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("Question id cannot be empty")
        if not isinstance(self.options, tuple):
            object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) != OPTION_COUNT:
            raise ValueError(
                f"Multiple-choice question needs {OPTION_COUNT} options, got {len(self.options)}"
            )
        letter = normalize_option_letter(self.correct_option)
        object.__setattr__(self, "correct_option", letter)

    @property
    def kind(self) -> QuestionKind:
        return QuestionKind.MULTIPLE_CHOICE

    @property
    def correct_text(self) -> str:
        """Text of the correct option."""
        return self.options[OPTION_LETTERS.index(self.correct_option)]

    def lettered_options(self) -> Tuple[Tuple[str, str], ...]:
        """Options paired with their letters, e.g. (("A", "..."), ...)."""
        return tuple(zip(OPTION_LETTERS, self.options))

    def with_id(self, question_id: str) -> MultipleChoiceQuestion:
        return replace(self, id=question_id)

    def to_dict(self) -> dict:
        """Serialize to the wire shape used by the generation service."""
        return {
            "id": self.id,
            "question": self.prompt_text,
            "options": list(self.options),
            "answer": self.correct_option,
        }

    @classmethod
    def from_dict(cls, data: dict) -> MultipleChoiceQuestion:
        return cls(
            id=data.get("id") or new_question_id(),
            prompt_text=data["question"],
            options=tuple(data["options"]),
            correct_option=data["answer"],
        )


@dataclass(frozen=True, slots=True)
class EssayQuestion:
    """
    Essay question with an answer guideline (immutable).

    Attributes:
        id: Stable question id
        prompt_text: Question text
        answer_guideline: Key points a good answer covers
    """

    id: str
    prompt_text: str
    answer_guideline: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Question id cannot be empty")

    @property
    def kind(self) -> QuestionKind:
        return QuestionKind.ESSAY

    def with_id(self, question_id: str) -> EssayQuestion:
        return replace(self, id=question_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.prompt_text,
            "answer": self.answer_guideline,
        }

    @classmethod
    def from_dict(cls, data: dict) -> EssayQuestion:
        return cls(
            id=data.get("id") or new_question_id(),
            prompt_text=data["question"],
            answer_guideline=data["answer"],
        )


Question = Union[MultipleChoiceQuestion, EssayQuestion]


def normalize_option_letter(value: str) -> str:
    """
    Normalize an answer to a bare option letter.

    Accepts "b", "B", "B.", "B)" or "B. some text".

    Raises:
        ValueError: If no letter A-E can be read
    """
    text = (value or "").strip().upper()
    if text and text[0] in OPTION_LETTERS and (len(text) == 1 or not text[1].isalpha()):
        return text[0]
    raise ValueError(f"Invalid option letter: {value!r}")


def question_from_dict(kind: QuestionKind, data: dict) -> Question:
    """Build the question variant matching kind."""
    if QuestionKind(kind) is QuestionKind.MULTIPLE_CHOICE:
        return MultipleChoiceQuestion.from_dict(data)
    return EssayQuestion.from_dict(data)
