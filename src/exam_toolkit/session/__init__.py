"""
Session Package

Exam session state and orchestration.
"""

from .controller import ExamSession
from .form import ExamForm

__all__ = ["ExamSession", "ExamForm"]
