"""
Module: exams

Purpose:
    Exam and Question value records. Exams are edited in the GUI and
    persisted in the settings file; every edit produces a new instance.

Key Functions:
    - Exam.new(): Fresh exam with a client-generated id
    - Question.new(): Empty question with a client-generated id
    - Exam.with_question_added / with_question_updated / with_question_removed
    - Exam.to_dict() / Exam.from_dict(): Storage format (camelCase keys)

Dependencies:
    - dataclasses (std)
    - uuid (std)
    - datetime (std)

Used By:
    - grading.request.GradingRequest
    - grading.prompts
    - gui.models.settings.SettingsStore
    - core.utils.serialization
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Literal, Optional, get_args

ExamLevel = Literal["undergraduate", "graduate", "phd", "professional"]
GradingHarshness = Literal["lenient", "moderate", "strict", "very-strict"]

EXAM_LEVELS: tuple[str, ...] = get_args(ExamLevel)
HARSHNESS_LEVELS: tuple[str, ...] = get_args(GradingHarshness)

DEFAULT_LEVEL: ExamLevel = "undergraduate"
DEFAULT_HARSHNESS: GradingHarshness = "moderate"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True, slots=True)
class Question:
    """
    One gradable question.

    Attributes:
        id: Client-generated unique identifier
        question: Question text shown to students
        example_answer: Model answer used as a reference by the grader
        marking_schema: Rubric text; authoritative source of point allocations
    """

    id: str
    question: str = ""
    example_answer: str = ""
    marking_schema: str = ""

    @classmethod
    def new(cls) -> Question:
        return cls(id=_new_id())

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "question": self.question,
            "exampleAnswer": self.example_answer,
            "markingSchema": self.marking_schema,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """
        Deserialize from the storage format.

        Missing text fields default to empty strings; a missing id gets a
        fresh one so older files still load.
        """
        return cls(
            id=str(data.get("id") or _new_id()),
            question=str(data.get("question") or ""),
            example_answer=str(data.get("exampleAnswer") or ""),
            marking_schema=str(data.get("markingSchema") or ""),
        )


@dataclass(frozen=True)
class Exam:
    """
    An exam definition (immutable).

    Attributes:
        id: Client-generated unique identifier
        title: Display title
        date: ISO-8601 creation timestamp
        subject: Optional subject/topic, e.g. "Physics"
        level: Optional academic level
        harshness: Optional grading harshness
        questions: Ordered questions

    Example:
        >>> exam = Exam.new().with_question_added(Question.new())
        >>> len(exam.questions)
        1
    """

    id: str
    title: str
    date: str
    subject: Optional[str] = None
    level: Optional[ExamLevel] = None
    harshness: Optional[GradingHarshness] = None
    questions: tuple[Question, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.level is not None and self.level not in EXAM_LEVELS:
            raise ValueError(f"Invalid exam level: {self.level!r}")
        if self.harshness is not None and self.harshness not in HARSHNESS_LEVELS:
            raise ValueError(f"Invalid grading harshness: {self.harshness!r}")

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def new(cls, title: str = "New Exam") -> Exam:
        """Create an empty exam with default level and harshness."""
        return cls(
            id=_new_id(),
            title=title,
            date=datetime.now(timezone.utc).isoformat(),
            subject="",
            level=DEFAULT_LEVEL,
            harshness=DEFAULT_HARSHNESS,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Edits (return new instances)
    # ─────────────────────────────────────────────────────────────────────────

    def with_changes(self, **changes: Any) -> Exam:
        """Copy with metadata changes. id and date are never changed."""
        changes.pop("id", None)
        changes.pop("date", None)
        if "questions" in changes:
            changes["questions"] = tuple(changes["questions"])
        return replace(self, **changes)

    def with_question_added(self, question: Question) -> Exam:
        return replace(self, questions=self.questions + (question,))

    def with_question_updated(self, question_id: str, **fields: str) -> Exam:
        """
        Replace text fields of one question.

        Raises:
            KeyError: If no question has the id
        """
        if self.get_question(question_id) is None:
            raise KeyError(question_id)
        fields.pop("id", None)
        return replace(
            self,
            questions=tuple(
                replace(q, **fields) if q.id == question_id else q
                for q in self.questions
            ),
        )

    def with_question_removed(self, question_id: str) -> Exam:
        return replace(
            self, questions=tuple(q for q in self.questions if q.id != question_id)
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Query Methods
    # ─────────────────────────────────────────────────────────────────────────

    def get_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def effective_level(self) -> str:
        return self.level or DEFAULT_LEVEL

    @property
    def effective_harshness(self) -> str:
        return self.harshness or DEFAULT_HARSHNESS

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "questions": [q.to_dict() for q in self.questions],
        }
        if self.subject is not None:
            d["subject"] = self.subject
        if self.level is not None:
            d["level"] = self.level
        if self.harshness is not None:
            d["harshness"] = self.harshness
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exam:
        """
        Deserialize from the storage format.

        Unknown level/harshness values are dropped rather than rejected so a
        hand-edited settings file cannot stop the exam list from loading.

        Raises:
            KeyError: If id or title is missing
        """
        level = data.get("level")
        harshness = data.get("harshness")
        questions_raw = data.get("questions") or []
        subject = data.get("subject")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            date=str(data.get("date") or ""),
            subject=str(subject) if subject is not None else None,
            level=level if level in EXAM_LEVELS else None,
            harshness=harshness if harshness in HARSHNESS_LEVELS else None,
            questions=tuple(
                Question.from_dict(q) for q in questions_raw if isinstance(q, dict)
            ),
        )

    def __repr__(self) -> str:
        return f"Exam({self.title!r}, {len(self.questions)} questions)"
