"""
Module: orchestrator

Purpose:
    Lifecycle of one screen-capture attempt: minimize the main window, open
    the selection overlay, wait for exactly one of completion, cancellation
    or the overlay closing, then grab, crop and encode the region.

States:
    IDLE -> WINDOW_MINIMIZING -> AWAITING_SELECTION
        -> CAPTURING -> DONE
        -> CANCELLED | CLOSED_UNEXPECTEDLY | FAILED

Rules:
    - One attempt in flight; a second request raises CaptureInProgressError.
    - The first terminal event wins. Later events (a close after the
      selection, a second cancel) are ignored.
    - Every terminal transition goes through _finish(): the overlay's
      signals are disconnected, the overlay is closed and the main window
      is restored.

Key Classes:
    - CaptureState: Attempt state enum
    - CaptureAttempt: Handle returned to the caller; emits succeeded/failed
    - CaptureOrchestrator: Runs attempts against an AppSession

Used By:
    - gui.commands.CommandRouter (CAPTURE_SCREEN)
    - gui.main_window.MainWindow
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Protocol

from PySide6.QtCore import QObject, QTimer, Signal

from grading_guru.capture.errors import (
    CaptureError,
    CaptureFailedError,
    CaptureInProgressError,
    NoPrimaryWindowError,
    SelectionCancelledError,
    SelectionWindowClosedError,
    is_quiet_capture_error,
)
from grading_guru.core.models.bounds import SelectionBounds

if TYPE_CHECKING:
    from grading_guru.gui.session import AppSession
    from grading_guru.gui.window_commands import WindowCommands

logger = logging.getLogger(__name__)

# Time for the overlay to disappear from the framebuffer before grabbing
DEFAULT_SETTLE_DELAY_MS = 150


class CaptureState(Enum):
    IDLE = "idle"
    WINDOW_MINIMIZING = "window_minimizing"
    AWAITING_SELECTION = "awaiting_selection"
    CAPTURING = "capturing"
    DONE = "done"
    CANCELLED = "cancelled"
    CLOSED_UNEXPECTEDLY = "closed_unexpectedly"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {CaptureState.DONE, CaptureState.CANCELLED, CaptureState.CLOSED_UNEXPECTEDLY, CaptureState.FAILED}
)


class ScreenGrabber(Protocol):
    def grab(self, bounds: SelectionBounds) -> str: ...


# ─────────────────────────────────────────────────────────────────────────────
# Attempt Handle
# ─────────────────────────────────────────────────────────────────────────────

class CaptureAttempt(QObject):
    """
    One user-initiated capture.

    The outcome is stored as soon as the attempt settles; the signals are
    emitted on the next event-loop turn so a caller can connect to an
    attempt that failed during request_capture(). After that the attempt
    (and its image) lives only as long as the caller keeps a reference.
    """

    stateChanged = Signal(object)  # CaptureState
    succeeded = Signal(str)  # PNG data URL
    failed = Signal(object)  # CaptureError

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.state = CaptureState.IDLE
        self.data_url: Optional[str] = None
        self.error: Optional[CaptureError] = None

    @property
    def is_settled(self) -> bool:
        return self.state.is_terminal

    def _advance(self, state: CaptureState) -> None:
        logger.debug(f"Capture {self.state.value} -> {state.value}")
        self.state = state
        self.stateChanged.emit(state)

    def _settle(
        self,
        state: CaptureState,
        data_url: Optional[str] = None,
        error: Optional[CaptureError] = None,
    ) -> bool:
        if self.is_settled:
            return False
        self.data_url = data_url
        self.error = error
        self._advance(state)
        QTimer.singleShot(0, self._emit_outcome)
        return True

    def _emit_outcome(self) -> None:
        if self.error is not None:
            self.failed.emit(self.error)
        else:
            self.succeeded.emit(self.data_url)
        # The orchestrator only owns an attempt until its outcome is delivered
        self.setParent(None)


# ─────────────────────────────────────────────────────────────────────────────
# Orchestrator
# ─────────────────────────────────────────────────────────────────────────────

class CaptureOrchestrator(QObject):
    """Runs capture attempts one at a time."""

    def __init__(
        self,
        session: "AppSession",
        window_commands: "WindowCommands",
        overlay_factory: Optional[Callable[[], QObject]] = None,
        grabber: Optional[ScreenGrabber] = None,
        settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        if overlay_factory is None:
            from grading_guru.capture.overlay import SelectionOverlay

            overlay_factory = SelectionOverlay
        if grabber is None:
            from grading_guru.capture.screen import QtScreenGrabber

            grabber = QtScreenGrabber()
        self._session = session
        self._window_commands = window_commands
        self._overlay_factory = overlay_factory
        self._grabber = grabber
        self._settle_delay_ms = settle_delay_ms

        self._pending: Optional[CaptureAttempt] = None
        self._overlay = None

    @property
    def pending(self) -> Optional[CaptureAttempt]:
        return self._pending

    @property
    def is_busy(self) -> bool:
        return self._pending is not None

    def request_capture(self) -> CaptureAttempt:
        """
        Start a capture attempt.

        Returns:
            The attempt handle. It may already be settled (no primary window).

        Raises:
            CaptureInProgressError: Another attempt has not settled yet
        """
        if self._pending is not None:
            raise CaptureInProgressError()

        attempt = CaptureAttempt(self)
        if self._session.main_window is None:
            logger.warning("Capture requested with no primary window")
            attempt._settle(CaptureState.FAILED, error=NoPrimaryWindowError())
            return attempt

        self._pending = attempt
        attempt._advance(CaptureState.WINDOW_MINIMIZING)
        self._window_commands.minimize()

        overlay = self._overlay_factory()
        overlay.selectionComplete.connect(self._on_selection_complete)
        overlay.selectionCancelled.connect(self._on_selection_cancelled)
        overlay.closed.connect(self._on_overlay_closed)
        self._overlay = overlay

        attempt._advance(CaptureState.AWAITING_SELECTION)
        overlay.show()
        logger.info("Waiting for screen selection")
        return attempt

    def cancel(self) -> None:
        """Cancel the pending attempt, if any."""
        if self._pending is not None:
            self._finish(self._pending, CaptureState.CANCELLED, error=SelectionCancelledError())

    # ─────────────────────────────────────────────────────────────────────────
    # Overlay events
    # ─────────────────────────────────────────────────────────────────────────

    def _awaiting(self) -> Optional[CaptureAttempt]:
        attempt = self._pending
        if attempt is None or attempt.state is not CaptureState.AWAITING_SELECTION:
            return None
        return attempt

    def _on_selection_complete(self, bounds: SelectionBounds) -> None:
        attempt = self._awaiting()
        if attempt is None:
            return
        if bounds.is_empty:
            logger.info(f"Empty selection {bounds}, treating as cancelled")
            self._finish(attempt, CaptureState.CANCELLED, error=SelectionCancelledError())
            return
        attempt._advance(CaptureState.CAPTURING)
        if self._overlay is not None:
            self._overlay.hide()
        QTimer.singleShot(self._settle_delay_ms, lambda: self._capture(attempt, bounds))

    def _on_selection_cancelled(self) -> None:
        attempt = self._awaiting()
        if attempt is not None:
            self._finish(attempt, CaptureState.CANCELLED, error=SelectionCancelledError())

    def _on_overlay_closed(self) -> None:
        attempt = self._awaiting()
        if attempt is not None:
            self._finish(attempt, CaptureState.CLOSED_UNEXPECTEDLY, error=SelectionWindowClosedError())

    def _capture(self, attempt: CaptureAttempt, bounds: SelectionBounds) -> None:
        if attempt is not self._pending:
            return
        try:
            data_url = self._grabber.grab(bounds)
        except CaptureError as e:
            logger.error(f"Capture failed: {e}")
            self._finish(attempt, CaptureState.FAILED, error=e)
            return
        except Exception as e:
            logger.exception("Unexpected error while capturing screen")
            self._finish(attempt, CaptureState.FAILED, error=CaptureFailedError(e))
            return
        logger.info(f"Captured region {bounds.width:g}x{bounds.height:g} ({len(data_url)} bytes encoded)")
        self._finish(attempt, CaptureState.DONE, data_url=data_url)

    # ─────────────────────────────────────────────────────────────────────────
    # Teardown
    # ─────────────────────────────────────────────────────────────────────────

    def _finish(
        self,
        attempt: CaptureAttempt,
        state: CaptureState,
        data_url: Optional[str] = None,
        error: Optional[CaptureError] = None,
    ) -> None:
        if attempt is not self._pending:
            return
        self._pending = None
        self._teardown()
        self._window_commands.restore()
        if error is not None and is_quiet_capture_error(error):
            logger.info(f"Capture ended: {error}")
        attempt._settle(state, data_url=data_url, error=error)

    def _teardown(self) -> None:
        overlay, self._overlay = self._overlay, None
        if overlay is None:
            return
        overlay.selectionComplete.disconnect(self._on_selection_complete)
        overlay.selectionCancelled.disconnect(self._on_selection_cancelled)
        overlay.closed.disconnect(self._on_overlay_closed)
        overlay.close()
        overlay.deleteLater()
