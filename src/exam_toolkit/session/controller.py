"""
Module: session.controller

Purpose:
    Own the state of one exam-building session and orchestrate its
    operations: form edits (with partition reconciliation), bulk
    generation, single-question regeneration, manual edits and export.

    State changes only happen between awaits on a single event loop.
    Bulk generation is serialized by a busy flag; regeneration is
    serialized per question id. Results are applied by id, so a question
    keeps its position no matter when its regeneration completes.

Key Classes:
    - ExamSession: Session state and operations

Dependencies:
    - partition: Range edits and reconciliation
    - generation: QuestionGenerator and request types
    - ingestion: Source file loading
    - export: PDF rendering

Used By:
    - cli
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Set

from exam_toolkit import partition
from exam_toolkit.core.models import Difficulty, DifficultyRange, ExamSet, ImagePayload, Question
from exam_toolkit.errors import ExamToolkitError, ServiceError, ValidationError
from exam_toolkit.export import ExportConfig, ExportResult, render_exam_pdf, suggest_file_name
from exam_toolkit.generation import GenerationRequest, QuestionGenerator, RegenerationRequest
from exam_toolkit.ingestion import ingest_file

from .form import ExamForm

logger = logging.getLogger(__name__)

MSG_ZERO_TOTAL = "The number of multiple-choice and essay questions cannot both be zero."
MSG_RANGE_MISMATCH = "The difficulty ranges do not match the total number of questions."


class ExamSession:
    """
    One exam-building session.

    Attributes:
        form: Current form snapshot
        exam: Generated exam, None until a generation succeeds
        error: User-facing message of the last failure, None after success
        is_generating: True while a bulk generation is outstanding

    Example:
        >>> session = ExamSession(OpenAIQuestionGenerator(config))
        >>> session.set_counts(5, 3)
        >>> session.split_range()
        >>> exam = await session.generate()
        >>> await session.regenerate_one(exam.essays[0].id)
    """

    def __init__(self, generator: QuestionGenerator, *, form: Optional[ExamForm] = None):
        self.generator = generator
        self.form = form or ExamForm()
        self.exam: Optional[ExamSet] = None
        self.error: Optional[str] = None
        self.is_generating = False
        self._busy: Set[str] = set()

    # ─────────────────────────────────────────────────────────────────────────
    # Form edits
    # ─────────────────────────────────────────────────────────────────────────

    def set_subject(self, subject: str) -> ExamForm:
        self.form = self.form.update(subject=subject)
        return self.form

    def set_topic(self, topic: str) -> ExamForm:
        self.form = self.form.update(topic=topic)
        return self.form

    def set_source_text(self, text: str) -> ExamForm:
        """Use text as source material; replaces any image source."""
        self.form = self.form.update(source_text=text, source_image=None)
        return self.form

    def set_source_image(self, image: ImagePayload) -> ExamForm:
        """Use an image as source material; replaces any text source."""
        self.form = self.form.update(source_text="", source_image=image)
        return self.form

    def clear_source(self) -> ExamForm:
        self.form = self.form.update(source_text="", source_image=None)
        return self.form

    def load_source(self, path: Path, mime_type: Optional[str] = None) -> ExamForm:
        """
        Ingest a file as source material.

        Raises:
            IngestionError: If the file cannot be used; the source is
                cleared in that case
        """
        try:
            material = ingest_file(path, mime_type)
        except ExamToolkitError:
            self.clear_source()
            raise
        if isinstance(material, ImagePayload):
            return self.set_source_image(material)
        return self.set_source_text(material)

    def set_counts(self, mcq_count: int, essay_count: int) -> ExamForm:
        """
        Change the question counts and re-fit the partition.

        Negative counts are treated as 0.
        """
        mcq_count = max(0, int(mcq_count))
        essay_count = max(0, int(essay_count))
        ranges = partition.reconcile(mcq_count + essay_count, self.form.ranges)
        self.form = self.form.update(mcq_count=mcq_count, essay_count=essay_count, ranges=ranges)
        logger.debug(f"Counts set to {mcq_count}+{essay_count}; {len(ranges)} ranges")
        return self.form

    def split_range(self) -> ExamForm:
        return self._set_ranges(partition.split(self.form.ranges))

    def remove_range(self, range_id: str) -> ExamForm:
        return self._set_ranges(partition.remove(self.form.ranges, range_id))

    def set_range_boundary(self, range_id: str, new_to: int) -> ExamForm:
        return self._set_ranges(partition.set_boundary(self.form.ranges, range_id, new_to))

    def set_range_difficulty(self, range_id: str, difficulty: Difficulty | str) -> ExamForm:
        return self._set_ranges(partition.set_difficulty(self.form.ranges, range_id, difficulty))

    def set_ranges(self, ranges: Sequence[DifficultyRange]) -> ExamForm:
        """Replace the partition wholesale; it is reconciled to the total."""
        return self._set_ranges(ranges)

    def _set_ranges(self, ranges: Sequence[DifficultyRange]) -> ExamForm:
        self.form = self.form.update(ranges=partition.reconcile(self.form.total, ranges))
        return self.form

    def reset(self) -> None:
        """Restore the default form and drop generated questions."""
        self.form = ExamForm()
        self.exam = None
        self.error = None
        self._busy.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Generation
    # ─────────────────────────────────────────────────────────────────────────

    def validate_for_generation(self) -> None:
        """
        Pre-flight checks for bulk generation.

        Raises:
            ValidationError: If the total is zero or the partition does
                not cover [1, total] exactly
        """
        if self.form.total == 0:
            raise ValidationError(MSG_ZERO_TOTAL)
        if not self.form.partition_matches_total:
            raise ValidationError(MSG_RANGE_MISMATCH)

    async def generate(self) -> ExamSet:
        """
        Generate a fresh exam from the current form.

        The previous exam is discarded when the request starts. On failure
        no partial result is kept and error holds the message.

        Raises:
            ValidationError: Pre-flight failure or a generation already running
            ServiceError: Generation service failure
        """
        if self.is_generating:
            raise ValidationError("A generation is already in progress.")
        try:
            self.validate_for_generation()
        except ValidationError as e:
            self.error = str(e)
            raise

        form = self.form
        request = GenerationRequest(
            context=form.context(),
            mcq_count=form.mcq_count,
            essay_count=form.essay_count,
            bands=form.bands(),
        )

        self.is_generating = True
        self.error = None
        self.exam = None
        self._busy.clear()
        try:
            exam = await self.generator.generate(request)
        except ServiceError as e:
            self.error = f"Failed to generate questions: {e.user_message}"
            raise
        except ExamToolkitError as e:
            self.error = f"Failed to generate questions: {e}"
            raise
        finally:
            self.is_generating = False

        self.exam = exam
        return exam

    # ─────────────────────────────────────────────────────────────────────────
    # Question edits
    # ─────────────────────────────────────────────────────────────────────────

    def _require_exam(self) -> ExamSet:
        if self.exam is None:
            raise ValidationError("No exam has been generated yet.")
        return self.exam

    def ordinal_for(self, question_id: str) -> int:
        """
        1-based exam position of a question.

        Raises:
            ValidationError: If there is no exam or the id is unknown
        """
        exam = self._require_exam()
        try:
            return exam.ordinal_of(question_id)
        except KeyError:
            raise ValidationError(f"Unknown question: {question_id}") from None

    def difficulty_for_question(self, question_id: str) -> Difficulty:
        return partition.difficulty_for(self.ordinal_for(question_id), self.form.ranges)

    def is_busy(self, question_id: str) -> bool:
        return question_id in self._busy

    def update_question(self, question: Question) -> ExamSet:
        """
        Replace a question's content by id (manual edit).

        Raises:
            ValidationError: If there is no exam, the id is unknown, or
                the variant differs
        """
        exam = self._require_exam()
        try:
            self.exam = exam.replace(question)
        except KeyError:
            raise ValidationError(f"Unknown question: {question.id}") from None
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return self.exam

    async def regenerate_one(self, question_id: str) -> Question:
        """
        Replace one question with a freshly generated one.

        The ordinal is resolved from the question's position and its
        difficulty from the current partition. The replacement keeps the
        original id and variant and is applied in place when the call
        completes. On failure the question is left untouched.

        Raises:
            ValidationError: Unknown id, or this question is already
                being regenerated
            ServiceError: Generation service failure
        """
        exam = self._require_exam()
        current = exam.find(question_id)
        if current is None:
            raise ValidationError(f"Unknown question: {question_id}")
        if question_id in self._busy:
            raise ValidationError(f"Question {question_id} is already being regenerated.")

        ordinal = exam.ordinal_of(question_id)
        request = RegenerationRequest(
            context=self.form.context(),
            kind=current.kind,
            difficulty=partition.difficulty_for(ordinal, self.form.ranges),
            exclude_text=current.prompt_text,
            ordinal=ordinal,
        )

        self._busy.add(question_id)
        try:
            fresh = await self.generator.regenerate(request)
        finally:
            self._busy.discard(question_id)

        if fresh.kind is not current.kind:
            raise ServiceError(
                f"Regeneration returned {fresh.kind} for {current.kind} question {question_id}",
                "Could not regenerate the question.",
            )
        replacement = fresh.with_id(question_id)

        # The exam may have been regenerated in bulk while we awaited.
        if self.exam is None or self.exam.find(question_id) is None:
            logger.warning(f"Question {question_id} no longer in exam; discarding regeneration")
            return replacement

        self.exam = self.exam.replace(replacement)
        logger.info(f"Replaced question {ordinal} ({current.kind})")
        return replacement

    # ─────────────────────────────────────────────────────────────────────────
    # Export
    # ─────────────────────────────────────────────────────────────────────────

    def suggested_file_name(self) -> str:
        return f"{suggest_file_name(self.form.subject, self.form.topic)}.pdf"

    def export_pdf(
        self,
        output_path: Optional[Path] = None,
        *,
        config: Optional[ExportConfig] = None,
        title: Optional[str] = None,
    ) -> ExportResult:
        """
        Export the current exam to PDF.

        Args:
            output_path: File or directory; a directory gets the suggested
                file name. Defaults to the suggested name in the working
                directory.

        Raises:
            ValidationError: If there is no exam
            ExportError: If rendering fails
        """
        exam = self._require_exam()
        if output_path is None:
            path = Path(self.suggested_file_name())
        else:
            path = Path(output_path)
            if path.is_dir():
                path = path / self.suggested_file_name()
        return render_exam_pdf(exam, path, config=config, title=title)
