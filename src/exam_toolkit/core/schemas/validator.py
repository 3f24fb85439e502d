"""
Schema Validation Utilities

Validates decoded generation-service payloads before any question object
is built from them.

Two levels, matching how the payload is used:
- Basic checks (always): required keys present, list/str types, option
  count and answer letter for multiple-choice items
- Strict checks (strict=True): full JSON Schema validation against the
  packaged *.schema.json files
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema

from exam_toolkit.core.models.questions import (
    OPTION_COUNT,
    QuestionKind,
    normalize_option_letter,
)


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class PayloadValidationError(Exception):
    """Raised when a service payload fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_exam_payload(
    data: Any,
    *,
    mcq_count: Optional[int] = None,
    essay_count: Optional[int] = None,
    strict: bool = True,
) -> None:
    """
    Validate a bulk generation payload.

    Expected shape: {"mcqs": [{question, options[5], answer}],
    "essays": [{question, answer}]}.

    Args:
        data: Decoded JSON
        mcq_count: Expected number of multiple-choice items (None skips)
        essay_count: Expected number of essay items (None skips)
        strict: If True, also validate with jsonschema

    Raises:
        PayloadValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise PayloadValidationError(
            f"Payload must be a JSON object, got {type(data).__name__}"
        )

    missing = [f for f in ("mcqs", "essays") if f not in data]
    if missing:
        raise PayloadValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )

    for key, kind in (("mcqs", QuestionKind.MULTIPLE_CHOICE), ("essays", QuestionKind.ESSAY)):
        items = data[key]
        if not isinstance(items, list):
            raise PayloadValidationError(f"{key} must be a list", path=key)
        for i, item in enumerate(items):
            _validate_item(kind, item, f"{key}[{i}]")

    if mcq_count is not None and len(data["mcqs"]) != mcq_count:
        raise PayloadValidationError(
            f"Expected {mcq_count} multiple-choice questions, got {len(data['mcqs'])}",
            path="mcqs",
        )
    if essay_count is not None and len(data["essays"]) != essay_count:
        raise PayloadValidationError(
            f"Expected {essay_count} essay questions, got {len(data['essays'])}",
            path="essays",
        )

    if strict:
        _validate_with_schema(data, "exam")


def validate_question_payload(kind: QuestionKind, data: Any, *, strict: bool = True) -> None:
    """
    Validate a single-question payload of the given variant.

    Args:
        kind: Expected question variant
        data: Decoded JSON
        strict: If True, also validate with jsonschema

    Raises:
        PayloadValidationError: If data is invalid
    """
    kind = QuestionKind(kind)
    _validate_item(kind, data, "")
    if strict:
        _validate_with_schema(data, "mcq" if kind is QuestionKind.MULTIPLE_CHOICE else "essay")


def _validate_item(kind: QuestionKind, data: Any, path: str) -> None:
    """Validate one question item."""
    if not isinstance(data, dict):
        raise PayloadValidationError("Question must be an object", path=path)

    required = ["question", "options", "answer"] if kind is QuestionKind.MULTIPLE_CHOICE else ["question", "answer"]
    missing = [f for f in required if f not in data]
    if missing:
        raise PayloadValidationError(
            f"Question missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )

    if not isinstance(data["question"], str) or not data["question"].strip():
        raise PayloadValidationError("question must be a non-empty string", path=_join(path, "question"))
    if not isinstance(data["answer"], str):
        raise PayloadValidationError("answer must be a string", path=_join(path, "answer"))

    if kind is QuestionKind.MULTIPLE_CHOICE:
        options = data["options"]
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise PayloadValidationError("options must be a list of strings", path=_join(path, "options"))
        if len(options) != OPTION_COUNT:
            raise PayloadValidationError(
                f"Expected {OPTION_COUNT} options, got {len(options)}",
                path=_join(path, "options"),
            )
        try:
            normalize_option_letter(data["answer"])
        except ValueError as e:
            raise PayloadValidationError(str(e), path=_join(path, "answer")) from e


def _validate_with_schema(data: Any, schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise PayloadValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message],
        ) from e


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key
