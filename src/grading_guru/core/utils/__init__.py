"""Core utilities: exam library serialization."""

from .serialization import (
    deserialize_exams,
    export_exams,
    import_exams,
    merge_exams,
    serialize_exams,
)

__all__ = [
    "deserialize_exams",
    "export_exams",
    "import_exams",
    "merge_exams",
    "serialize_exams",
]
