"""
Grading request and its preconditions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from grading_guru.core.models.exams import Exam, Question
from grading_guru.grading.errors import GradingPreconditionError


@dataclass(frozen=True)
class GradingRequest:
    """
    Everything one grading call needs.

    Fields are optional so the GUI can build a request from whatever state
    it has and let `validate()` name the first missing piece.
    """

    exam: Optional[Exam]
    questions: Sequence[Question]
    image_data: Optional[str]

    @classmethod
    def for_exam(cls, exam: Optional[Exam], image_data: Optional[str]) -> "GradingRequest":
        return cls(exam=exam, questions=tuple(exam.questions) if exam else (), image_data=image_data)

    def validate(self) -> None:
        """
        Raises:
            GradingPreconditionError: With field "exam", "image" or "questions"
        """
        if self.exam is None:
            raise GradingPreconditionError("exam", "No exam selected")
        if not self.image_data:
            raise GradingPreconditionError("image", "No image data provided")
        if not self.questions:
            raise GradingPreconditionError("questions", "No exam questions provided")
