"""
Module: export.config

Purpose:
    Page and typography settings for PDF export. Immutable configuration
    with validation on construction.

Key Classes:
    - ExportConfig
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for exam PDF export (immutable).

    Attributes:
        page_size: (width, height) in points
        margin_left: Left margin in points
        margin_right: Right margin in points
        margin_top: Top margin in points
        margin_bottom: Bottom margin in points
        font: Body font name
        font_bold: Heading font name
        body_size: Body font size
        heading_size: Section heading font size
        title_size: Answer-key title font size
        line_spacing: Line height as a multiple of the font size
        option_indent: Indent of multiple-choice options in points
        header_fields: Labels of the fill-in lines at the top of page one
        include_answer_key: Whether to append the answer key page(s)
    """

    page_size: Tuple[float, float] = A4
    margin_left: float = 15 * mm
    margin_right: float = 15 * mm
    margin_top: float = 20 * mm
    margin_bottom: float = 17 * mm
    font: str = "Times-Roman"
    font_bold: str = "Times-Bold"
    body_size: float = 12
    heading_size: float = 14
    title_size: float = 16
    line_spacing: float = 1.25
    option_indent: float = 5 * mm
    header_fields: Tuple[str, ...] = ("Name", "Class", "Date")
    include_answer_key: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if min(self.margin_left, self.margin_right, self.margin_top, self.margin_bottom) < 0:
            raise ValueError("Margins must be non-negative")
        if self.content_width <= self.option_indent:
            raise ValueError(f"Margins leave no room for content: width={self.content_width}")
        if self.body_size <= 0 or self.heading_size <= 0 or self.title_size <= 0:
            raise ValueError("Font sizes must be positive")
        if self.line_spacing < 1.0:
            raise ValueError(f"line_spacing must be >= 1.0: {self.line_spacing}")

    @property
    def page_width(self) -> float:
        return self.page_size[0]

    @property
    def page_height(self) -> float:
        return self.page_size[1]

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def top_y(self) -> float:
        return self.page_height - self.margin_top

    def line_height(self, size: float) -> float:
        return size * self.line_spacing
