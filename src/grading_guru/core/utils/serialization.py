"""
Serialization Utilities

To/from JSON helpers for exam libraries.

- `serialize_exams` / `deserialize_exams` convert between Exam records and
  the library dict; deserialization validates first and never returns a
  partially-loaded library.
- `export_exams` / `import_exams` add file I/O with atomic writes.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from ..models.exams import Exam
from ..schemas.validator import (
    EXAM_LIBRARY_SCHEMA_VERSION,
    ValidationError,
    validate_exam_library,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Library Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_exams(exams: Iterable[Exam]) -> dict[str, Any]:
    """
    Serialize exams to an exam library dictionary.

    Args:
        exams: Exams to include, in display order

    Returns:
        Dictionary suitable for JSON serialization
    """
    return {
        "schema_version": EXAM_LIBRARY_SCHEMA_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "exams": [exam.to_dict() for exam in exams],
    }


def deserialize_exams(data: dict[str, Any], *, strict: bool = True) -> list[Exam]:
    """
    Deserialize an exam library dictionary.

    Args:
        data: Dictionary from JSON
        strict: Whether to run full JSON Schema validation

    Returns:
        Exams in file order

    Raises:
        ValidationError: If the library is invalid
    """
    validate_exam_library(data, strict=strict)
    return [Exam.from_dict(entry) for entry in data["exams"]]


# ─────────────────────────────────────────────────────────────────────────────
# File I/O
# ─────────────────────────────────────────────────────────────────────────────

def export_exams(path: Path, exams: Iterable[Exam]) -> Path:
    """
    Write an exam library file.

    Uses a temp file and atomic replace so an interrupted write never
    leaves a truncated library behind.

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = serialize_exams(exams)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    temp_path.replace(path)
    logger.info(f"Exported {len(payload['exams'])} exams to {path}")
    return path


def import_exams(path: Path) -> list[Exam]:
    """
    Read an exam library file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not valid JSON or fails validation
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Exam library is not valid JSON: {e}") from e
    exams = deserialize_exams(data, strict=True)
    logger.info(f"Imported {len(exams)} exams from {path}")
    return exams


def merge_exams(existing: Iterable[Exam], incoming: Iterable[Exam]) -> list[Exam]:
    """
    Merge imported exams into the current library.

    Exams with an id already present replace the existing entry in place;
    new ids are appended in import order.
    """
    merged = list(existing)
    index = {exam.id: i for i, exam in enumerate(merged)}
    for exam in incoming:
        if exam.id in index:
            merged[index[exam.id]] = exam
        else:
            index[exam.id] = len(merged)
            merged.append(exam)
    return merged
