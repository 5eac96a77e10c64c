"""
Host command surface.

UI elements (menu actions, buttons, shortcuts) invoke named commands
through CommandRouter instead of calling window methods directly.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from grading_guru.capture.orchestrator import CaptureAttempt, CaptureOrchestrator
    from grading_guru.gui.window_commands import WindowCommands

logger = logging.getLogger(__name__)


class HostCommand(str, Enum):
    WINDOW_MINIMIZE = "window-minimize"
    WINDOW_MAXIMIZE = "window-maximize"
    WINDOW_CLOSE = "window-close"
    WINDOW_RESTORE = "window-restore"
    CAPTURE_SCREEN = "capture-screen"


class CommandRouter:
    def __init__(self, window_commands: "WindowCommands", orchestrator: "CaptureOrchestrator"):
        self.window_commands = window_commands
        self.orchestrator = orchestrator

    def invoke(self, command: HostCommand) -> Optional["CaptureAttempt"]:
        """
        Run a host command.

        Returns:
            The CaptureAttempt for CAPTURE_SCREEN, None for window commands.

        Raises:
            CaptureInProgressError: CAPTURE_SCREEN while an attempt is pending
            ValueError: Unknown command name
        """
        command = HostCommand(command)
        logger.debug(f"Host command: {command.value}")
        if command is HostCommand.CAPTURE_SCREEN:
            return self.orchestrator.request_capture()
        if command is HostCommand.WINDOW_MINIMIZE:
            self.window_commands.minimize()
        elif command is HostCommand.WINDOW_MAXIMIZE:
            self.window_commands.maximize()
        elif command is HostCommand.WINDOW_CLOSE:
            self.window_commands.close()
        elif command is HostCommand.WINDOW_RESTORE:
            self.window_commands.restore()
        return None
