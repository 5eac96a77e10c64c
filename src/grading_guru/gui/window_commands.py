"""
Window command surface: minimize, maximize (toggle), close and restore the
primary window. Every command is a no-op when no primary window exists.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QWidget

if TYPE_CHECKING:
    from grading_guru.gui.session import AppSession

logger = logging.getLogger(__name__)


class WindowCommands:
    def __init__(self, session: "AppSession"):
        self._session = session

    def _window(self, command: str) -> Optional[QWidget]:
        window = self._session.main_window
        if window is None:
            logger.debug(f"Ignoring window {command}: no primary window")
        return window

    def minimize(self) -> None:
        window = self._window("minimize")
        if window is not None:
            window.showMinimized()

    def maximize(self) -> None:
        """Maximize, or restore to normal size if already maximized."""
        window = self._window("maximize")
        if window is None:
            return
        if window.isMaximized():
            window.showNormal()
        else:
            window.showMaximized()

    def close(self) -> None:
        """
        Close the primary window.

        The application quits when its last window closes, except on macOS
        where apps stay alive without windows (see gui.app.run).
        """
        window = self._window("close")
        if window is not None:
            window.close()

    def restore(self) -> None:
        """Bring the primary window back from minimized and focus it."""
        window = self._window("restore")
        if window is None:
            return
        if window.isMinimized():
            window.setWindowState(window.windowState() & ~Qt.WindowState.WindowMinimized)
        window.show()
        window.raise_()
        window.activateWindow()
