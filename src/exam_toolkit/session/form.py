"""
Module: session.form

Purpose:
    ExamForm - immutable snapshot of everything the user has entered:
    subject, topic, source material, question counts and the difficulty
    partition. The session replaces the whole snapshot on every edit.

Key Classes:
    - ExamForm
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from exam_toolkit.core.models import DifficultyRange, ImagePayload
from exam_toolkit.generation.requests import SourceContext
from exam_toolkit.partition import is_valid, reconcile, to_bands

DEFAULT_MCQ_COUNT = 3
DEFAULT_ESSAY_COUNT = 2


@dataclass(frozen=True)
class ExamForm:
    """
    User input for one exam (immutable).

    Attributes:
        subject: Subject name
        topic: Topic name
        source_text: Typed or extracted source material
        source_image: Uploaded image source (exclusive with source_text
            when set through the session)
        mcq_count: Number of multiple-choice questions (>= 0)
        essay_count: Number of essay questions (>= 0)
        ranges: Difficulty partition of [1, mcq_count + essay_count]; a
            missing or ill-fitting partition is reconciled to the total,
            so an omitted one becomes a single medium range
    """

    subject: str = ""
    topic: str = ""
    source_text: str = ""
    source_image: Optional[ImagePayload] = None
    mcq_count: int = DEFAULT_MCQ_COUNT
    essay_count: int = DEFAULT_ESSAY_COUNT
    ranges: Tuple[DifficultyRange, ...] = ()

    def __post_init__(self) -> None:
        """Validate form on construction."""
        if self.mcq_count < 0 or self.essay_count < 0:
            raise ValueError(
                f"Counts must be non-negative: mcq={self.mcq_count}, essay={self.essay_count}"
            )
        ranges = tuple(self.ranges)
        if not is_valid(self.total, ranges):
            ranges = reconcile(self.total, ranges)
        object.__setattr__(self, "ranges", ranges)

    @property
    def total(self) -> int:
        return self.mcq_count + self.essay_count

    @property
    def partition_matches_total(self) -> bool:
        return is_valid(self.total, self.ranges)

    def context(self) -> SourceContext:
        return SourceContext(
            subject=self.subject,
            topic=self.topic,
            source_text=self.source_text or None,
            source_image=self.source_image,
        )

    def bands(self):
        return to_bands(self.ranges)

    def update(self, **changes) -> ExamForm:
        return replace(self, **changes)
