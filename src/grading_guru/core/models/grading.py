"""
Module: grading

Purpose:
    Strictly-typed grading verdict. Instances are only produced by
    grading.decoding, which guarantees every number is a finite float and
    every list holds strings, whatever the remote service sent.

Key Functions:
    - GradingResult.score_label: "final/total" display string
    - GradingResult.to_dict(): Plain dict in the remote response layout

Dependencies:
    - dataclasses (std)

Used By:
    - grading.decoding
    - grading.providers
    - gui.widgets.grading_review
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


@dataclass(frozen=True, slots=True)
class MatchedQuestion:
    """Which exam question the answer was identified as addressing."""

    question: str = ""
    confidence: float = 0.0


@dataclass(frozen=True, slots=True)
class SchemaCriterion:
    """One marking-schema line item and the points awarded for it."""

    criterion: str = ""
    points_awarded: float = 0.0
    points_possible: float = 0.0
    deduction_reason: str = ""


@dataclass(frozen=True, slots=True)
class GradingBreakdown:
    final_score: float = 0.0
    total_points_possible: float = 0.0
    confidence: float = 0.0
    schema_criteria: tuple[SchemaCriterion, ...] = ()


@dataclass(frozen=True, slots=True)
class GradingFeedback:
    detailed_comments: str = ""
    criteria_met: tuple[str, ...] = ()
    criteria_unmet: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OcrQuality:
    """Legibility notes from the grader about the captured image."""

    issues: tuple[str, ...] = ()
    impact_on_grading: str = ""


@dataclass(frozen=True, slots=True)
class GradingResult:
    """
    Complete, coerced grading verdict.

    Attributes:
        matched_question: Question identified in the image
        grading: Score breakdown against the marking schema
        feedback: Comments for the student
        ocr_quality: Present only when the service reported it
    """

    matched_question: MatchedQuestion = field(default_factory=MatchedQuestion)
    grading: GradingBreakdown = field(default_factory=GradingBreakdown)
    feedback: GradingFeedback = field(default_factory=GradingFeedback)
    ocr_quality: Optional[OcrQuality] = None

    @property
    def score_label(self) -> str:
        """E.g. "7.5/10"."""
        return (
            f"{_format_number(self.grading.final_score)}/"
            f"{_format_number(self.grading.total_points_possible)}"
        )

    @property
    def confidence_percent(self) -> float:
        return self.grading.confidence * 100

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "matched_question": {
                "question": self.matched_question.question,
                "confidence": self.matched_question.confidence,
            },
            "grading": {
                "final_score": self.grading.final_score,
                "total_points_possible": self.grading.total_points_possible,
                "confidence": self.grading.confidence,
                "schema_criteria": [
                    {
                        "criterion": c.criterion,
                        "points_awarded": c.points_awarded,
                        "points_possible": c.points_possible,
                        "deduction_reason": c.deduction_reason,
                    }
                    for c in self.grading.schema_criteria
                ],
            },
            "feedback": {
                "detailed_comments": self.feedback.detailed_comments,
                "criteria_met": list(self.feedback.criteria_met),
                "criteria_unmet": list(self.feedback.criteria_unmet),
                "improvements": list(self.feedback.improvements),
            },
        }
        if self.ocr_quality is not None:
            d["ocr_quality"] = {
                "issues": list(self.ocr_quality.issues),
                "impact_on_grading": self.ocr_quality.impact_on_grading,
            }
        return d
