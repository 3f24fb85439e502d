"""
Module: generation.requests

Purpose:
    Immutable request objects passed to a QuestionGenerator. They carry
    the exam context (subject, topic, source material) plus either the
    full count and difficulty distribution (bulk) or one question's
    variant, difficulty and the text it must differ from (regeneration).

Key Classes:
    - GenerationRequest: Bulk generation
    - RegenerationRequest: Single-question regeneration
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from exam_toolkit.core.models import Difficulty, DifficultyBand, ImagePayload, QuestionKind


@dataclass(frozen=True)
class SourceContext:
    """
    Exam context shared by both request types.

    Attributes:
        subject: Subject name (may be empty)
        topic: Topic name (may be empty)
        source_text: Extracted or typed source material
        source_image: Image to use as source material
    """

    subject: str = ""
    topic: str = ""
    source_text: Optional[str] = None
    source_image: Optional[ImagePayload] = None

    @property
    def has_source(self) -> bool:
        return bool(self.source_text and self.source_text.strip()) or self.source_image is not None

    @property
    def has_subject_and_topic(self) -> bool:
        return bool(self.subject.strip() and self.topic.strip())


@dataclass(frozen=True)
class GenerationRequest:
    """
    Bulk generation request (immutable).

    Attributes:
        context: Subject, topic and source material
        mcq_count: Number of multiple-choice questions
        essay_count: Number of essay questions
        bands: Difficulty bands covering [1, mcq_count + essay_count]
    """

    context: SourceContext
    mcq_count: int
    essay_count: int
    bands: Tuple[DifficultyBand, ...]

    def __post_init__(self) -> None:
        """Validate request on construction."""
        if self.mcq_count < 0 or self.essay_count < 0:
            raise ValueError(
                f"Counts must be non-negative: mcq={self.mcq_count}, essay={self.essay_count}"
            )
        object.__setattr__(self, "bands", tuple(self.bands))

    @property
    def total(self) -> int:
        return self.mcq_count + self.essay_count


@dataclass(frozen=True)
class RegenerationRequest:
    """
    Single-question regeneration request (immutable).

    Attributes:
        context: Subject, topic and source material
        kind: Variant of the question being replaced
        difficulty: Difficulty resolved from the question's ordinal
        exclude_text: Current question text; the replacement must differ
        ordinal: 1-based position of the question in the exam
    """

    context: SourceContext
    kind: QuestionKind
    difficulty: Difficulty
    exclude_text: str
    ordinal: int
