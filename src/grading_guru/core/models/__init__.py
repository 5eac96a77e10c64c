"""
Core Models Package

Immutable value records shared by the capture, grading and GUI layers.

All models are frozen dataclasses: edits return new instances, so an exam
handed to a grading worker thread cannot change underneath it.
"""

from .bounds import CropRect, DisplayInfo, SelectionBounds, nearest_display, round_half_up
from .exams import Exam, Question, EXAM_LEVELS, HARSHNESS_LEVELS
from .grading import (
    GradingBreakdown,
    GradingFeedback,
    GradingResult,
    MatchedQuestion,
    OcrQuality,
    SchemaCriterion,
)

__all__ = [
    "CropRect",
    "DisplayInfo",
    "SelectionBounds",
    "nearest_display",
    "round_half_up",
    "Exam",
    "Question",
    "EXAM_LEVELS",
    "HARSHNESS_LEVELS",
    "GradingBreakdown",
    "GradingFeedback",
    "GradingResult",
    "MatchedQuestion",
    "OcrQuality",
    "SchemaCriterion",
]
