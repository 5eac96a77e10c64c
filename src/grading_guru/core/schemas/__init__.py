"""
Schemas Package

JSON schema definitions and validation utilities for exam libraries.
"""

from .validator import (
    validate_exam,
    validate_exam_library,
    ValidationError,
    EXAM_LIBRARY_SCHEMA_VERSION,
)

__all__ = [
    "validate_exam",
    "validate_exam_library",
    "ValidationError",
    "EXAM_LIBRARY_SCHEMA_VERSION",
]
