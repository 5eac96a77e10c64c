"""
Application session: the objects that live as long as the app does.

Holds the primary window reference so window commands and the capture
orchestrator never reach for a global. The reference is cleared when the
window is destroyed.
"""
from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional

from PySide6.QtWidgets import QWidget

if TYPE_CHECKING:
    from grading_guru.gui.models.settings import SettingsStore

logger = logging.getLogger(__name__)


class AppSession:
    def __init__(self, settings: Optional["SettingsStore"] = None, platform: str = sys.platform):
        self.settings = settings
        self.platform = platform
        self._main_window: Optional[QWidget] = None

    @property
    def main_window(self) -> Optional[QWidget]:
        return self._main_window

    @property
    def is_macos(self) -> bool:
        return self.platform == "darwin"

    def attach_window(self, window: QWidget) -> None:
        """Register the primary window."""
        self._main_window = window
        window.destroyed.connect(self._on_window_destroyed)
        logger.debug("Primary window attached")

    def _on_window_destroyed(self, *_args) -> None:
        logger.debug("Primary window destroyed")
        self._main_window = None
