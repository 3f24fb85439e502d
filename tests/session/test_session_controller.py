"""
Unit Tests for ExamSession

Uses the in-memory FakeGenerator from conftest; asyncio.Event gates hold
service calls open to exercise overlapping operations.
"""

import asyncio
from pathlib import Path

import pytest
from PIL import Image

from exam_toolkit.core.models import Difficulty, DifficultyRange, ImagePayload, QuestionKind
from exam_toolkit.errors import IngestionError, ServiceError, ValidationError
from exam_toolkit.partition import is_valid
from exam_toolkit.session import ExamForm, ExamSession


@pytest.fixture
def session(fake_generator) -> ExamSession:
    return ExamSession(fake_generator, form=ExamForm(subject="History", topic="Independence"))


class TestFormEdits:
    """Tests for form edits and partition upkeep."""

    def test_init_when_default_form_then_one_medium_range_of_five(self, session):
        assert session.form.total == 5
        assert [(r.to, r.difficulty) for r in session.form.ranges] == [(5, Difficulty.MEDIUM)]

    def test_form_when_counts_given_without_ranges_then_one_range_covers_total(self):
        form = ExamForm(mcq_count=6, essay_count=4)

        assert [(r.to, r.difficulty) for r in form.ranges] == [(10, Difficulty.MEDIUM)]
        assert form.partition_matches_total

    def test_form_when_ranges_short_of_total_then_reconciled(self):
        # Arrange
        easy = DifficultyRange.create(4, Difficulty.EASY)

        # Act
        form = ExamForm(mcq_count=3, essay_count=2, ranges=(easy,))

        # Assert
        assert [(r.id, r.to, r.difficulty) for r in form.ranges] == [(easy.id, 5, Difficulty.EASY)]

    def test_form_when_counts_zero_then_no_ranges(self):
        assert ExamForm(mcq_count=0, essay_count=0).ranges == ()

    def test_form_when_update_changes_counts_then_partition_follows(self):
        form = ExamForm().update(mcq_count=8)

        assert [r.to for r in form.ranges] == [10]

    def test_set_counts_when_total_grows_then_last_range_extended(self, session):
        # Arrange
        session.split_range()
        first, second = session.form.ranges

        # Act
        form = session.set_counts(5, 3)

        # Assert
        assert [(r.id, r.to) for r in form.ranges] == [(first.id, 3), (second.id, 8)]

    def test_set_counts_when_negative_then_clamped_to_zero(self, session):
        form = session.set_counts(-2, 4)

        assert (form.mcq_count, form.essay_count) == (0, 4)
        assert is_valid(4, form.ranges)

    def test_set_counts_when_both_zero_then_empty_partition(self, session):
        assert session.set_counts(0, 0).ranges == ()

    def test_range_edits_when_applied_then_partition_stays_valid(self, session):
        session.set_counts(6, 4)
        session.split_range()
        session.split_range()
        ids = [r.id for r in session.form.ranges]

        session.set_range_boundary(ids[0], 8)
        session.set_range_difficulty(ids[1], "hard")
        session.remove_range(ids[0])

        assert is_valid(10, session.form.ranges)
        assert session.form.ranges[0].difficulty is Difficulty.HARD

    def test_set_ranges_when_short_of_total_then_reconciled(self, session):
        session.set_ranges([DifficultyRange.create(2, Difficulty.EASY)])

        assert [(r.to, r.difficulty) for r in session.form.ranges] == [(5, Difficulty.EASY)]

    def test_set_source_image_when_text_present_then_text_cleared(self, session):
        session.set_source_text("Some text")

        form = session.set_source_image(ImagePayload(data=b"x", mime_type="image/png"))

        assert form.source_text == ""
        assert form.source_image is not None

    def test_load_source_when_text_file_then_text_set(self, session, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("Proclamation read on 17 August.", encoding="utf-8")

        form = session.load_source(path)

        assert form.source_text == "Proclamation read on 17 August."

    def test_load_source_when_unsupported_then_source_cleared(self, session, tmp_path: Path):
        session.set_source_text("old")
        path = tmp_path / "data.zip"
        path.write_bytes(b"PK")

        with pytest.raises(IngestionError):
            session.load_source(path)

        assert session.form.source_text == ""
        assert session.form.source_image is None

    def test_load_source_when_image_over_pixel_limit_then_source_cleared(self, session, sample_image, monkeypatch):
        # Arrange
        session.set_source_text("stale")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        # Act
        with pytest.raises(IngestionError):
            session.load_source(sample_image)

        # Assert
        assert session.form.source_text == ""
        assert session.form.source_image is None

    def test_reset_when_called_then_defaults_restored(self, session):
        session.set_counts(10, 0)
        session.reset()

        assert session.form == ExamForm(ranges=session.form.ranges)
        assert session.form.total == 5
        assert session.exam is None


class TestGenerate:
    """Tests for bulk generation."""

    @pytest.mark.asyncio
    async def test_generate_when_valid_form_then_exam_and_request_bands(self, session, fake_generator):
        # Arrange
        session.split_range()

        # Act
        exam = await session.generate()

        # Assert
        assert session.exam is exam
        assert (len(exam.mcqs), len(exam.essays)) == (3, 2)
        request = fake_generator.generate_calls[0]
        assert [(b.start, b.end) for b in request.bands] == [(1, 3), (4, 5)]
        assert request.context.subject == "History"
        assert session.error is None

    @pytest.mark.asyncio
    async def test_generate_when_total_zero_then_validation_error_without_call(self, session, fake_generator):
        session.set_counts(0, 0)

        with pytest.raises(ValidationError, match="cannot both be zero"):
            await session.generate()

        assert fake_generator.generate_calls == []

    @pytest.mark.asyncio
    async def test_generate_when_form_counts_differ_from_default_then_bands_cover_total(self, fake_generator):
        # Arrange
        form = ExamForm(subject="S", topic="T", mcq_count=6, essay_count=4)
        session = ExamSession(fake_generator, form=form)

        # Act
        exam = await session.generate()

        # Assert
        assert exam.total == 10
        assert [(b.start, b.end) for b in fake_generator.generate_calls[0].bands] == [(1, 10)]

    @pytest.mark.asyncio
    async def test_generate_when_partition_mismatch_then_validation_error(self, fake_generator):
        form = ExamForm(mcq_count=3, essay_count=2)
        object.__setattr__(form, "ranges", (DifficultyRange.create(4),))
        session = ExamSession(fake_generator, form=form)

        with pytest.raises(ValidationError, match="do not match"):
            await session.generate()

        assert fake_generator.generate_calls == []
        assert session.error is not None

    @pytest.mark.asyncio
    async def test_generate_when_service_fails_then_no_exam_and_error_set(self, session, fake_generator, service_error):
        await session.generate()
        fake_generator.fail_with = service_error

        with pytest.raises(ServiceError):
            await session.generate()

        assert session.exam is None
        assert session.error == "Failed to generate questions: Could not communicate with the AI service."
        assert session.is_generating is False

    @pytest.mark.asyncio
    async def test_generate_when_already_running_then_second_call_rejected(self, session, fake_generator):
        # Arrange
        fake_generator.gate = asyncio.Event()
        first = asyncio.create_task(session.generate())
        await asyncio.sleep(0)

        # Act
        with pytest.raises(ValidationError, match="already in progress"):
            await session.generate()
        fake_generator.gate.set()
        await first

        # Assert
        assert len(fake_generator.generate_calls) == 1
        assert session.exam is not None


class TestRegenerate:
    """Tests for single-question regeneration and edits."""

    @pytest.mark.asyncio
    async def test_regenerate_when_essay_then_ordinal_and_difficulty_resolved(self, session, fake_generator):
        """mcq=3, essay=2: essay index 0 is ordinal 4 and takes the band covering 4."""
        # Arrange
        session.split_range()
        hard_id = session.form.ranges[1].id
        session.set_range_difficulty(hard_id, Difficulty.HARD)
        exam = await session.generate()
        essay = exam.essays[0]

        # Act
        fresh = await session.regenerate_one(essay.id)

        # Assert
        request = fake_generator.regenerate_calls[0]
        assert request.ordinal == 4
        assert request.difficulty is Difficulty.HARD
        assert request.kind is QuestionKind.ESSAY
        assert request.exclude_text == essay.prompt_text
        assert fresh.id == essay.id
        assert session.exam.essays[0].prompt_text == "Fresh essay 1"
        assert session.exam.essays[1] == exam.essays[1]
        assert session.exam.mcqs == exam.mcqs

    @pytest.mark.asyncio
    async def test_regenerate_when_service_fails_then_question_untouched(self, session, fake_generator, service_error):
        exam = await session.generate()
        fake_generator.fail_with = service_error

        with pytest.raises(ServiceError):
            await session.regenerate_one(exam.mcqs[1].id)

        assert session.exam == exam
        assert not session.is_busy(exam.mcqs[1].id)

    @pytest.mark.asyncio
    async def test_regenerate_when_service_returns_other_variant_then_question_untouched(self, session, fake_generator):
        # Arrange
        exam = await session.generate()
        target = exam.mcqs[0].id
        fake_generator.swap_kinds = True

        # Act
        with pytest.raises(ServiceError):
            await session.regenerate_one(target)

        # Assert
        assert session.exam == exam
        assert not session.is_busy(target)

    @pytest.mark.asyncio
    async def test_regenerate_when_same_question_in_flight_then_rejected(self, session, fake_generator):
        exam = await session.generate()
        target = exam.mcqs[0].id
        fake_generator.gate = asyncio.Event()
        first = asyncio.create_task(session.regenerate_one(target))
        await asyncio.sleep(0)

        assert session.is_busy(target)
        with pytest.raises(ValidationError, match="already being regenerated"):
            await session.regenerate_one(target)

        fake_generator.gate.set()
        await first
        assert not session.is_busy(target)

    @pytest.mark.asyncio
    async def test_regenerate_when_two_questions_overlap_then_each_lands_in_place(self, session, fake_generator):
        # Arrange
        exam = await session.generate()
        fake_generator.gate = asyncio.Event()
        a, b = exam.mcqs[0].id, exam.essays[1].id

        # Act
        tasks = [asyncio.create_task(session.regenerate_one(qid)) for qid in (b, a)]
        await asyncio.sleep(0)
        fake_generator.gate.set()
        await asyncio.gather(*tasks)

        # Assert
        assert [q.id for q in session.exam] == [q.id for q in exam]
        assert session.exam.mcqs[0].prompt_text.startswith("Fresh MCQ")
        assert session.exam.essays[1].prompt_text.startswith("Fresh essay")
        assert session.exam.mcqs[1:] == exam.mcqs[1:]

    @pytest.mark.asyncio
    async def test_regenerate_when_unknown_id_then_validation_error(self, session):
        await session.generate()

        with pytest.raises(ValidationError, match="Unknown question"):
            await session.regenerate_one("nope")

    @pytest.mark.asyncio
    async def test_regenerate_when_no_exam_then_validation_error(self, session):
        with pytest.raises(ValidationError, match="No exam"):
            await session.regenerate_one("any")

    @pytest.mark.asyncio
    async def test_update_question_when_edited_then_replaced_in_place(self, session, make_essay):
        exam = await session.generate()
        edited = make_essay("Edited essay", "Edited guideline", qid=exam.essays[0].id)

        updated = session.update_question(edited)

        assert updated.essays[0].prompt_text == "Edited essay"
        assert session.ordinal_for(edited.id) == 4

    @pytest.mark.asyncio
    async def test_update_question_when_variant_changes_then_validation_error(self, session, make_essay):
        exam = await session.generate()

        with pytest.raises(ValidationError):
            session.update_question(make_essay(qid=exam.mcqs[0].id))

    @pytest.mark.asyncio
    async def test_difficulty_for_question_when_bands_then_matches_ordinal(self, session):
        session.split_range()
        session.set_range_difficulty(session.form.ranges[0].id, "easy")
        exam = await session.generate()

        assert session.difficulty_for_question(exam.mcqs[2].id) is Difficulty.EASY
        assert session.difficulty_for_question(exam.essays[0].id) is Difficulty.MEDIUM


class TestExport:
    """Tests for export from a session."""

    @pytest.mark.asyncio
    async def test_export_pdf_when_directory_then_suggested_name_used(self, session, tmp_path: Path):
        await session.generate()

        result = session.export_pdf(tmp_path)

        assert result.path == tmp_path / "history_independence.pdf"
        assert result.path.exists()

    def test_export_pdf_when_no_exam_then_validation_error(self, session, tmp_path: Path):
        with pytest.raises(ValidationError):
            session.export_pdf(tmp_path / "x.pdf")
