"""
Core Models Package

Immutable, validated data models shared by the partition manager, the
generator, the session controller and the exporter.

All models in this package are frozen dataclasses. Updates return new
instances; ids are assigned once and carried through every copy.
"""

from .difficulty import Difficulty
from .ranges import DifficultyBand, DifficultyRange
from .questions import (
    OPTION_LETTERS,
    EssayQuestion,
    MultipleChoiceQuestion,
    Question,
    QuestionKind,
)
from .exam import ExamSet
from .source import ImagePayload

__all__ = [
    "Difficulty",
    "DifficultyBand",
    "DifficultyRange",
    "OPTION_LETTERS",
    "EssayQuestion",
    "MultipleChoiceQuestion",
    "Question",
    "QuestionKind",
    "ExamSet",
    "ImagePayload",
]
