"""
Schema Validation Utilities

Validates exam library JSON before it is turned into Exam records.

Two levels:
- Basic checks (always): required fields, types of the question list,
  known level/harshness values. Cheap enough to run on every settings load.
- Strict checks (`strict=True`): full JSON Schema validation against
  `exam.schema.json` and `exam_library.schema.json`. Used for files the
  user imports from disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..models.exams import EXAM_LEVELS, HARSHNESS_LEVELS


# Schema version written into exported exam libraries
EXAM_LIBRARY_SCHEMA_VERSION = 1


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


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _run_jsonschema(data: Any, schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message],
        ) from e


def validate_exam(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a serialized exam.

    Args:
        data: Exam dictionary (storage format, camelCase question keys)
        strict: If True, also validate against the JSON Schema

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Exam must be an object, got {type(data).__name__}")

    required = ["id", "title", "questions"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )

    level = data.get("level")
    if level not in (None, "") and level not in EXAM_LEVELS:
        raise ValidationError(f"Invalid level: {level!r}", path="level")

    harshness = data.get("harshness")
    if harshness not in (None, "") and harshness not in HARSHNESS_LEVELS:
        raise ValidationError(f"Invalid harshness: {harshness!r}", path="harshness")

    questions = data.get("questions")
    if not isinstance(questions, list):
        raise ValidationError("questions must be a list", path="questions")
    for i, question in enumerate(questions):
        _validate_question(question, f"questions[{i}]")

    if strict:
        _run_jsonschema(data, "exam")


def _validate_question(data: Any, path: str) -> None:
    """Validate one question entry."""
    if not isinstance(data, dict):
        raise ValidationError("question must be an object", path=path)
    if not data.get("id"):
        raise ValidationError("question is missing an id", path=f"{path}.id")
    for key in ("question", "exampleAnswer", "markingSchema"):
        value = data.get(key, "")
        if not isinstance(value, str):
            raise ValidationError(
                f"{key} must be a string, got {type(value).__name__}",
                path=f"{path}.{key}",
            )


def validate_exam_library(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate an exported exam library (`{"schema_version", "exams": [...]}`).

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Exam library must be an object")

    version = data.get("schema_version")
    if version != EXAM_LIBRARY_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported exam library schema version: {version} "
            f"(expected {EXAM_LIBRARY_SCHEMA_VERSION})",
            path="schema_version",
        )

    exams = data.get("exams")
    if not isinstance(exams, list):
        raise ValidationError("exams must be a list", path="exams")

    seen: set[str] = set()
    for i, exam in enumerate(exams):
        try:
            validate_exam(exam, strict=False)
        except ValidationError as e:
            path = f"exams[{i}].{e.path}" if e.path else f"exams[{i}]"
            raise ValidationError(str(e), path=path, errors=e.errors) from e
        exam_id = str(exam["id"])
        if exam_id in seen:
            raise ValidationError(f"Duplicate exam id: {exam_id}", path=f"exams[{i}].id")
        seen.add(exam_id)

    if strict:
        _run_jsonschema(data, "exam_library")
