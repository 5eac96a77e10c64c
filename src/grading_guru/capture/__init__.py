"""
Screen capture: selection overlay, display grabbing and the attempt state
machine that ties them to the main window.
"""
from grading_guru.capture.errors import (
    CaptureError,
    CaptureFailedError,
    CaptureInProgressError,
    NoPrimaryWindowError,
    NoScreenSourcesError,
    SelectionCancelledError,
    SelectionWindowClosedError,
    is_quiet_capture_error,
)
from grading_guru.capture.orchestrator import CaptureAttempt, CaptureOrchestrator, CaptureState

__all__ = [
    "CaptureError",
    "CaptureFailedError",
    "CaptureInProgressError",
    "NoPrimaryWindowError",
    "NoScreenSourcesError",
    "SelectionCancelledError",
    "SelectionWindowClosedError",
    "is_quiet_capture_error",
    "CaptureAttempt",
    "CaptureOrchestrator",
    "CaptureState",
]
