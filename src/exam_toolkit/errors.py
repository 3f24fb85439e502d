"""
Module: errors

Purpose:
    Exception hierarchy shared by every layer of the toolkit. All errors
    derive from ExamToolkitError so callers can catch one base type at the
    surface (CLI) while the session controller distinguishes local
    validation from service failures.

Key Classes:
    - ExamToolkitError: Base class
    - ValidationError: Local pre-flight rejection, no external call made
    - ServiceError: Generation service failure
    - IngestionError: Source file could not be read
    - ExportError: PDF could not be written
    - ConfigError: Invalid or incomplete configuration

Used By:
    - session.controller
    - generation.client
    - ingestion.loader
    - export.pdf
    - cli
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ExamToolkitError(Exception):
    """Base error for the exam toolkit."""
    pass


class ValidationError(ExamToolkitError):
    """Request rejected locally before any service call."""
    pass


class ConfigError(ExamToolkitError):
    """Configuration is missing or invalid."""
    pass


class ServiceError(ExamToolkitError):
    """
    Generation service failed (network, empty response, malformed payload).

    Attributes:
        user_message: Short message suitable for display
    """

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class IngestionError(ExamToolkitError):
    """Uploaded source could not be ingested."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ExportError(ExamToolkitError):
    """Error during PDF export."""
    pass
