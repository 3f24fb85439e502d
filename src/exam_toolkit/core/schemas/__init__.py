"""
Schemas Package

JSON schema definitions and validation utilities for generation
service payloads.
"""

from .validator import (
    validate_exam_payload,
    validate_question_payload,
    PayloadValidationError,
)

__all__ = [
    "validate_exam_payload",
    "validate_question_payload",
    "PayloadValidationError",
]
