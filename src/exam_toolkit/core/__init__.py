"""
Exam Toolkit Core Package

Shared data models and payload schemas. These models are the single
source of truth for the partition manager, generator, session and
exporter.
"""

from .models import (
    Difficulty,
    DifficultyBand,
    DifficultyRange,
    EssayQuestion,
    ExamSet,
    ImagePayload,
    MultipleChoiceQuestion,
    Question,
    QuestionKind,
)

__all__ = [
    "Difficulty",
    "DifficultyBand",
    "DifficultyRange",
    "EssayQuestion",
    "ExamSet",
    "ImagePayload",
    "MultipleChoiceQuestion",
    "Question",
    "QuestionKind",
]
