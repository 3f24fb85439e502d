"""
Unit Tests for PDF Export

Rendered PDFs are read back with PyMuPDF to check content and order.
"""

from pathlib import Path

import fitz
import pytest

from exam_toolkit.core.models import ExamSet
from exam_toolkit.errors import ExportError
from exam_toolkit.export import ExportConfig, render_exam_pdf, suggest_file_name


def _pages_text(path: Path):
    with fitz.open(path) as doc:
        return [page.get_text("text") for page in doc]


class TestRenderExamPdf:
    """Tests for render_exam_pdf()."""

    def test_render_when_exam_then_questions_then_answer_key_page(self, sample_exam, tmp_path: Path):
        # Arrange
        output = tmp_path / "out" / "exam.pdf"

        # Act
        result = render_exam_pdf(sample_exam, output)

        # Assert
        assert output.exists()
        pages = _pages_text(output)
        assert result.page_count == len(pages) == 2
        assert "MULTIPLE CHOICE" in pages[0]
        assert "ESSAY" in pages[0]
        assert "Name:" in pages[0]
        assert "ANSWER KEY" in pages[1]
        assert "ANSWER KEY" not in pages[0]

    def test_render_when_essays_then_numbering_continues_after_mcqs(self, sample_exam, tmp_path: Path):
        output = tmp_path / "exam.pdf"

        render_exam_pdf(sample_exam, output)

        first = _pages_text(output)[0]
        assert "3. Q3" in first
        assert "4. E1" in first
        assert "5. E2" in first
        assert first.index("3. Q3") < first.index("4. E1")

    def test_render_when_answer_key_then_letters_and_guidelines_listed(self, sample_exam, tmp_path: Path):
        output = tmp_path / "exam.pdf"

        render_exam_pdf(sample_exam, output)

        key = _pages_text(output)[1]
        assert "No." in key and "Answer" in key
        for letter in ("A", "B", "C"):
            assert letter in key
        assert "4. Light, CO2, glucose." in key

    def test_render_when_answer_key_disabled_then_single_page(self, sample_exam, tmp_path: Path):
        output = tmp_path / "exam.pdf"

        result = render_exam_pdf(sample_exam, output, config=ExportConfig(include_answer_key=False))

        assert result.page_count == 1
        assert "ANSWER KEY" not in _pages_text(output)[0]

    def test_render_when_many_questions_then_paginates(self, make_mcq, tmp_path: Path):
        exam = ExamSet(mcqs=tuple(make_mcq(f"Question number {i} " * 8) for i in range(40)))
        output = tmp_path / "long.pdf"

        result = render_exam_pdf(exam, output)

        assert result.page_count > 3
        assert result.page_count == len(_pages_text(output))

    def test_render_when_empty_exam_then_raises_error(self, tmp_path: Path):
        with pytest.raises(ExportError, match="no questions"):
            render_exam_pdf(ExamSet(), tmp_path / "empty.pdf")

    def test_render_when_unwritable_path_then_raises_error(self, sample_exam, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(ExportError, match="Failed to write"):
            render_exam_pdf(sample_exam, blocker / "exam.pdf")

    def test_render_when_title_then_title_on_first_page(self, sample_exam, tmp_path: Path):
        output = tmp_path / "exam.pdf"

        render_exam_pdf(sample_exam, output, title="Biology Quiz")

        assert "Biology Quiz" in _pages_text(output)[0]


class TestSuggestFileName:
    """Tests for suggest_file_name()."""

    def test_suggest_when_subject_and_topic_then_slug(self):
        assert suggest_file_name("Biology", "Cell Division!") == "biology_cell_division"

    def test_suggest_when_blank_then_default(self):
        assert suggest_file_name("", "  ") == "exam"


class TestExportConfig:
    """Tests for ExportConfig validation."""

    def test_init_when_margins_consume_page_then_raises_error(self):
        with pytest.raises(ValueError, match="no room"):
            ExportConfig(margin_left=300, margin_right=300)

    def test_init_when_line_spacing_below_one_then_raises_error(self):
        with pytest.raises(ValueError, match="line_spacing"):
            ExportConfig(line_spacing=0.5)
