"""
Capture error taxonomy.

Quiet errors are normal user outcomes (cancel, closed overlay, nothing to
capture from) and are logged but never shown in a dialog. The rest are
platform failures the user should see.
"""
from __future__ import annotations

from typing import Optional


class CaptureError(Exception):
    """Base class for capture failures."""

    is_quiet = False


class NoPrimaryWindowError(CaptureError):
    is_quiet = True

    def __init__(self):
        super().__init__("Capture unavailable: no primary window")


class SelectionCancelledError(CaptureError):
    is_quiet = True

    def __init__(self):
        super().__init__("Selection cancelled")


class SelectionWindowClosedError(CaptureError):
    is_quiet = True

    def __init__(self):
        super().__init__("Selection window closed unexpectedly")


class NoScreenSourcesError(CaptureError):
    def __init__(self):
        super().__init__("No screen sources found")


class CaptureFailedError(CaptureError):
    """Grabbing, cropping or encoding the selected region failed."""

    def __init__(self, underlying: Optional[BaseException] = None, message: Optional[str] = None):
        super().__init__(message or f"Screen capture failed: {underlying}")
        self.underlying = underlying


class CaptureInProgressError(CaptureError):
    def __init__(self):
        super().__init__("A capture is already in progress")


def is_quiet_capture_error(exc: BaseException) -> bool:
    """True for capture outcomes that should not produce a dialog."""
    return isinstance(exc, CaptureError) and exc.is_quiet
