"""
Export Package

PDF export of a finished exam with its answer key.
"""

from .config import ExportConfig
from .pdf import ExportResult, render_exam_pdf, suggest_file_name

__all__ = ["ExportConfig", "ExportResult", "render_exam_pdf", "suggest_file_name"]
