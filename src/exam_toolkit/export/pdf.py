"""
Module: export.pdf

Purpose:
    Render an ExamSet to PDF using ReportLab. Layout, in exam order:

    - Fill-in header lines (Name / Class / Date)
    - MULTIPLE CHOICE section, questions numbered from 1 with options A-E
    - ESSAY section, numbering continuing after the last multiple-choice
    - New page: ANSWER KEY with a No./Answer grid for multiple-choice and
      numbered answer guidelines for essays

    Text is wrapped to the content width and pages break whenever the
    cursor would cross the bottom margin.

Key Functions:
    - render_exam_pdf(): Main rendering function
    - suggest_file_name(): File stem from subject and topic

Key Classes:
    - ExportResult: Output path and page count

Dependencies:
    - reportlab: PDF generation

Used By:
    - session.controller.ExamSession.export_pdf
    - cli
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from exam_toolkit.core.models import ExamSet
from exam_toolkit.errors import ExportError

from .config import ExportConfig

logger = logging.getLogger(__name__)

DEFAULT_FILE_STEM = "exam"
HEADER_FILL = ".................................................."
KEY_HEADER_RGB = (41 / 255, 128 / 255, 185 / 255)
KEY_NUMBER_COL = 20 * mm
KEY_ANSWER_COL = 35 * mm


@dataclass(frozen=True)
class ExportResult:
    """
    Export result (immutable).

    Attributes:
        path: Written PDF file
        page_count: Number of pages, answer key included
    """
    path: Path
    page_count: int


def suggest_file_name(subject: str = "", topic: str = "") -> str:
    """
    File stem built from subject and topic.

    Example:
        >>> suggest_file_name("Biology", "Cell Division")
        'biology_cell_division'
    """
    parts = [p for p in (subject, topic) if p and p.strip()]
    stem = "_".join(parts).strip().lower()
    stem = re.sub(r"[^\w]+", "_", stem).strip("_")
    return stem or DEFAULT_FILE_STEM


class _PageWriter:
    """Cursor over a canvas that wraps text and breaks pages."""

    def __init__(self, c: canvas.Canvas, config: ExportConfig):
        self.c = c
        self.config = config
        self.y = config.top_y
        self.page_count = 1

    def new_page(self) -> None:
        self.c.showPage()
        self.page_count += 1
        self.y = self.config.top_y

    def ensure_space(self, height: float) -> None:
        if self.y - height < self.config.margin_bottom:
            self.new_page()

    def skip(self, height: float) -> None:
        self.y -= height

    def wrap(self, text: str, font: str, size: float, indent: float = 0.0) -> List[str]:
        width = self.config.content_width - indent
        lines: List[str] = []
        for paragraph in text.splitlines() or [""]:
            lines.extend(simpleSplit(paragraph, font, size, width) or [""])
        return lines

    def text(self, text: str, *, bold: bool = False, size: Optional[float] = None, indent: float = 0.0) -> None:
        """Write wrapped text at the cursor, breaking pages between lines."""
        cfg = self.config
        font = cfg.font_bold if bold else cfg.font
        size = size or cfg.body_size
        leading = cfg.line_height(size)
        for line in self.wrap(text, font, size, indent):
            self.ensure_space(leading)
            self.y -= leading
            self.c.setFont(font, size)
            self.c.drawString(cfg.margin_left + indent, self.y, line)

    def heading(self, text: str, size: Optional[float] = None, *, centered: bool = False) -> None:
        cfg = self.config
        size = size or cfg.heading_size
        leading = cfg.line_height(size)
        # keep a heading together with at least two body lines
        self.ensure_space(leading + 2 * cfg.line_height(cfg.body_size))
        self.y -= leading
        self.c.setFont(cfg.font_bold, size)
        if centered:
            self.c.drawCentredString(cfg.page_width / 2, self.y, text)
        else:
            self.c.drawString(cfg.margin_left, self.y, text)
        self.y -= leading / 2


def render_exam_pdf(
    exam: ExamSet,
    output_path: Path,
    *,
    config: Optional[ExportConfig] = None,
    title: Optional[str] = None,
) -> ExportResult:
    """
    Render an exam and its answer key to a PDF file.

    Args:
        exam: Questions in final order
        output_path: Path to write PDF (parent directories are created)
        config: Page and typography settings
        title: Optional document title (PDF metadata and first line)

    Returns:
        ExportResult with path and page count

    Raises:
        ExportError: If the exam is empty or the file cannot be written

    Example:
        >>> result = render_exam_pdf(exam, Path("out/biology.pdf"))
        >>> result.page_count
        2
    """
    config = config or ExportConfig()
    if exam.is_empty:
        raise ExportError("Cannot export an exam with no questions")

    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        c = canvas.Canvas(str(output_path), pagesize=config.page_size)
        if title:
            c.setTitle(title)
        writer = _PageWriter(c, config)

        if title:
            writer.heading(title, config.title_size, centered=True)
        _draw_header_fields(writer)
        _draw_questions(writer, exam)
        if config.include_answer_key:
            writer.new_page()
            _draw_answer_key(writer, exam)

        c.showPage()
        c.save()
    except OSError as e:
        logger.error(f"Failed to write {output_path}: {e}")
        raise ExportError(f"Failed to write PDF {output_path}: {e}") from e

    logger.info(f"Exported {exam.total} questions to {output_path} ({writer.page_count} pages)")
    return ExportResult(path=output_path, page_count=writer.page_count)


def _draw_header_fields(writer: _PageWriter) -> None:
    for label in writer.config.header_fields:
        writer.text(f"{label}: {HEADER_FILL}", size=writer.config.heading_size)
        writer.skip(writer.config.body_size * 0.3)
    writer.skip(writer.config.body_size)


def _draw_questions(writer: _PageWriter, exam: ExamSet) -> None:
    cfg = writer.config
    body_leading = cfg.line_height(cfg.body_size)

    if exam.mcqs:
        writer.heading("MULTIPLE CHOICE")
        for number, mcq in enumerate(exam.mcqs, start=1):
            # stem plus five options, roughly
            writer.ensure_space(body_leading * 7)
            writer.text(f"{number}. {mcq.prompt_text}")
            for letter, option in mcq.lettered_options():
                writer.text(f"{letter}. {option}", indent=cfg.option_indent)
            writer.skip(body_leading / 2)

    if exam.essays:
        writer.skip(body_leading)
        writer.heading("ESSAY")
        for j, essay in enumerate(exam.essays):
            number = len(exam.mcqs) + j + 1
            writer.ensure_space(body_leading * 3)
            writer.text(f"{number}. {essay.prompt_text}")
            # space to answer
            writer.skip(body_leading * 2)


def _draw_answer_key(writer: _PageWriter, exam: ExamSet) -> None:
    cfg = writer.config
    writer.heading("ANSWER KEY", cfg.title_size, centered=True)

    if exam.mcqs:
        writer.heading("Multiple Choice")
        _draw_key_table(writer, [(str(i), q.correct_option) for i, q in enumerate(exam.mcqs, start=1)])
        writer.skip(cfg.line_height(cfg.body_size))

    if exam.essays:
        writer.heading("Essay")
        for j, essay in enumerate(exam.essays):
            number = len(exam.mcqs) + j + 1
            writer.text(f"{number}. {essay.answer_guideline}")
            writer.skip(cfg.body_size * 0.4)


def _draw_key_table(writer: _PageWriter, rows: List[tuple]) -> None:
    """Two-column grid (No. / Answer) with a filled header row."""
    c = writer.c
    cfg = writer.config
    row_h = cfg.line_height(cfg.body_size) + 4
    x0 = cfg.margin_left
    x1 = x0 + KEY_NUMBER_COL
    x2 = x1 + KEY_ANSWER_COL

    def draw_row(cells: tuple, header: bool) -> None:
        writer.ensure_space(row_h)
        top = writer.y
        bottom = top - row_h
        if header:
            c.setFillColorRGB(*KEY_HEADER_RGB)
            c.rect(x0, bottom, x2 - x0, row_h, stroke=0, fill=1)
            c.setFillColorRGB(1, 1, 1)
            c.setFont(cfg.font_bold, cfg.body_size)
        else:
            c.setFillColorRGB(0, 0, 0)
            c.setFont(cfg.font, cfg.body_size)
        c.rect(x0, bottom, x1 - x0, row_h, stroke=1, fill=0)
        c.rect(x1, bottom, x2 - x1, row_h, stroke=1, fill=0)
        baseline = bottom + (row_h - cfg.body_size) / 2 + 1
        c.drawString(x0 + 4, baseline, cells[0])
        c.drawString(x1 + 4, baseline, cells[1])
        c.setFillColorRGB(0, 0, 0)
        writer.y = bottom

    draw_row(("No.", "Answer"), header=True)
    for row in rows:
        if writer.y - row_h < cfg.margin_bottom:
            writer.new_page()
            draw_row(("No.", "Answer"), header=True)
        draw_row(row, header=False)
