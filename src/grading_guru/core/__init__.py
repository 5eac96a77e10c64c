"""
Grading Guru Core Package

Data models and storage helpers with no Qt dependency, so they can be used
from worker threads and tested without a display.
"""

from .models import Exam, Question, GradingResult, SelectionBounds, DisplayInfo

__all__ = [
    "Exam",
    "Question",
    "GradingResult",
    "SelectionBounds",
    "DisplayInfo",
]
