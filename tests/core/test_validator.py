"""
Unit Tests for Payload Schema Validation

Tests for the validator module.
"""

import pytest

from exam_toolkit.core.models import QuestionKind
from exam_toolkit.core.schemas.validator import (
    PayloadValidationError,
    validate_exam_payload,
    validate_question_payload,
)


class TestValidateExamPayload:
    """Tests for validate_exam_payload function."""

    @pytest.fixture
    def valid_payload(self) -> dict:
        """Create a valid two-plus-one payload."""
        return {
            "mcqs": [
                {"question": "Capital of France?", "options": ["Paris", "Rome", "Oslo", "Bern", "Kyiv"], "answer": "A"},
                {"question": "2 + 3?", "options": ["1", "2", "3", "4", "5"], "answer": "E."},
            ],
            "essays": [
                {"question": "Discuss the French Revolution.", "answer": "Causes, events, outcomes."},
            ],
        }

    def test_validate_when_valid_payload_then_passes(self, valid_payload):
        validate_exam_payload(valid_payload, mcq_count=2, essay_count=1)

    def test_validate_when_not_an_object_then_raises_error(self):
        with pytest.raises(PayloadValidationError, match="JSON object"):
            validate_exam_payload([1, 2])

    def test_validate_when_essays_missing_then_lists_missing_field(self, valid_payload):
        del valid_payload["essays"]

        with pytest.raises(PayloadValidationError) as exc:
            validate_exam_payload(valid_payload)

        assert exc.value.errors == ["Missing field: essays"]

    def test_validate_when_four_options_then_reports_path(self, valid_payload):
        valid_payload["mcqs"][1]["options"].pop()

        with pytest.raises(PayloadValidationError) as exc:
            validate_exam_payload(valid_payload)

        assert exc.value.path == "mcqs[1].options"

    def test_validate_when_answer_not_a_letter_then_raises_error(self, valid_payload):
        valid_payload["mcqs"][0]["answer"] = "Paris"

        with pytest.raises(PayloadValidationError, match="Invalid option letter"):
            validate_exam_payload(valid_payload)

    def test_validate_when_count_mismatch_then_raises_error(self, valid_payload):
        with pytest.raises(PayloadValidationError, match="Expected 3 multiple-choice"):
            validate_exam_payload(valid_payload, mcq_count=3, essay_count=1)

    def test_validate_when_empty_question_text_then_raises_error(self, valid_payload):
        valid_payload["essays"][0]["question"] = "   "

        with pytest.raises(PayloadValidationError, match="non-empty"):
            validate_exam_payload(valid_payload)

    def test_validate_when_strict_and_option_not_string_then_raises_error(self, valid_payload):
        valid_payload["mcqs"][0]["options"][2] = 3

        with pytest.raises(PayloadValidationError, match="list of strings"):
            validate_exam_payload(valid_payload)

    def test_validate_when_empty_lists_then_passes(self):
        validate_exam_payload({"mcqs": [], "essays": []}, mcq_count=0, essay_count=0)


class TestValidateQuestionPayload:
    """Tests for validate_question_payload function."""

    def test_validate_when_valid_essay_then_passes(self):
        validate_question_payload(QuestionKind.ESSAY, {"question": "Q", "answer": "G"})

    def test_validate_when_essay_missing_answer_then_raises_error(self):
        with pytest.raises(PayloadValidationError, match="missing required fields"):
            validate_question_payload(QuestionKind.ESSAY, {"question": "Q"})

    def test_validate_when_mcq_without_options_then_raises_error(self):
        with pytest.raises(PayloadValidationError) as exc:
            validate_question_payload(QuestionKind.MULTIPLE_CHOICE, {"question": "Q", "answer": "A"})

        assert "Missing field: options" in exc.value.errors

    def test_validate_when_strict_schema_checked_then_passes_lowercase_letter(self):
        validate_question_payload(
            QuestionKind.MULTIPLE_CHOICE,
            {"question": "Q", "options": list("abcde"), "answer": "c"},
            strict=True,
        )
