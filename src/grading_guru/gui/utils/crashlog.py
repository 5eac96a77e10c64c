"""
Crash capture for frozen builds, where stderr is invisible to the user.

Layers:
1. Python exceptions on the main thread: sys.excepthook writes a report
   and shows a blocking dialog before exiting.
2. Worker-thread exceptions: threading.excepthook appends to last_crash.log.
3. Native crashes: faulthandler writes tracebacks to last_crash.log.
4. Qt critical/fatal messages: appended to last_crash.log.
5. Hard process death: an unclean-exit marker left behind is detected on
   the next start, and the recovered log is offered to the user.
"""
from __future__ import annotations

import atexit
import faulthandler
import platform
import sys
import threading
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from PySide6.QtCore import QtMsgType, Qt, qInstallMessageHandler
from PySide6.QtWidgets import QApplication, QMessageBox

from grading_guru.gui.utils import paths

MAX_CRASH_LOGS = 5

APP_TITLE = "Grading Guru"

_faulthandler_file: Optional[TextIO] = None
_app_version = "unknown"


def get_crashlog_dir() -> Path:
    """Get the directory for crash logs, creating it if needed."""
    crash_dir = paths.get_crash_log_dir()
    crash_dir.mkdir(parents=True, exist_ok=True)
    return crash_dir


def _marker_path() -> Path:
    return get_crashlog_dir() / ".running"


def _last_crash_path() -> Path:
    return get_crashlog_dir() / "last_crash.log"


def _append_last_crash(text: str) -> None:
    try:
        with open(_last_crash_path(), "a", encoding="utf-8") as f:
            f.write(text)
    except OSError:
        pass  # nowhere left to report to


def _rotate_crash_logs() -> None:
    """Delete the oldest crash_*.log files so a new one fits under MAX_CRASH_LOGS."""
    logs = sorted(get_crashlog_dir().glob("crash_*.log"), key=lambda p: p.stat().st_mtime)
    while len(logs) >= MAX_CRASH_LOGS:
        try:
            logs.pop(0).unlink()
        except OSError:
            pass


def format_crash_report(exc_type, exc_value, exc_tb, app_version: str = "unknown") -> str:
    """Human-readable crash report with version and platform details."""
    tb_text = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    return "\n".join([
        f"{APP_TITLE} Crash Report",
        "=" * 50,
        f"Timestamp: {datetime.now().isoformat()}",
        f"Version: {app_version}",
        f"Python: {sys.version}",
        f"Platform: {platform.platform()}",
        f"Frozen: {paths.is_frozen()}",
        "",
        "Exception:",
        "-" * 50,
        tb_text,
    ])


def write_crash_report(content: str) -> Optional[Path]:
    """
    Write a timestamped crash log, rotating old ones.

    Returns:
        Path of the written log, or None if it could not be written
    """
    try:
        _rotate_crash_logs()
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        crash_file = get_crashlog_dir() / f"crash_{timestamp}.log"
        crash_file.write_text(content, encoding="utf-8")
        return crash_file
    except OSError:
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Unclean exit detection
# ─────────────────────────────────────────────────────────────────────────────

def _create_unclean_exit_marker() -> None:
    try:
        _marker_path().write_text(datetime.now().isoformat())
    except OSError:
        pass


def _remove_unclean_exit_marker() -> None:
    try:
        _marker_path().unlink(missing_ok=True)
    except OSError:
        pass


def check_previous_crash() -> Optional[str]:
    """
    Check whether the previous session exited uncleanly.

    Returns:
        The recovered last_crash.log content (may be empty), or None if the
        previous session exited cleanly.
    """
    marker = _marker_path()
    if not marker.exists():
        return None
    content = ""
    crash_file = _last_crash_path()
    if crash_file.exists():
        try:
            content = crash_file.read_text(encoding="utf-8")
        except OSError:
            pass
    _remove_unclean_exit_marker()
    return content


def show_previous_crash_dialog(crash_content: str) -> None:
    """Tell the user the last session crashed and where the report went."""
    if QApplication.instance() is None:
        return
    crash_file = write_crash_report(
        f"{APP_TITLE} Crash Report (recovered from previous session)\n"
        f"{'=' * 50}\n"
        f"Recovered at: {datetime.now().isoformat()}\n\n"
        f"{crash_content}"
    )
    msg = QMessageBox()
    msg.setIcon(QMessageBox.Icon.Warning)
    msg.setWindowTitle(f"{APP_TITLE} - Previous Session Crashed")
    msg.setText("The application crashed in a previous session.")
    if crash_file is not None:
        msg.setInformativeText(
            f"A crash report has been saved to:\n{crash_file}\n\n"
            "Please include this file when reporting issues."
        )
    msg.setDetailedText(crash_content or "No crash details available.")
    msg.setStandardButtons(QMessageBox.StandardButton.Ok)
    msg.exec()


# ─────────────────────────────────────────────────────────────────────────────
# Handlers
# ─────────────────────────────────────────────────────────────────────────────

def _qt_message_handler(mode, context, message):
    if mode in (QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
        level = "FATAL" if mode == QtMsgType.QtFatalMsg else "CRITICAL"
        _append_last_crash(
            f"\n[{datetime.now().isoformat()}] Qt {level}:\n"
            f"  File: {context.file}:{context.line}\n"
            f"  Function: {context.function}\n"
            f"  Message: {message}\n"
        )
    print(f"Qt: {message}", file=sys.stderr)


def _thread_excepthook(args) -> None:
    tb_text = "".join(traceback.format_exception(args.exc_type, args.exc_value, args.exc_traceback))
    thread_name = args.thread.name if args.thread else "Unknown"
    print(f"\n*** Unhandled exception in thread '{thread_name}' ***\n{tb_text}", file=sys.stderr)
    _append_last_crash(f"\n[{datetime.now().isoformat()}] Thread exception in '{thread_name}':\n{tb_text}")


def _install_faulthandler() -> None:
    global _faulthandler_file
    try:
        _faulthandler_file = open(_last_crash_path(), "a", encoding="utf-8")
    except OSError as e:
        print(f"Warning: Could not install faulthandler: {e}", file=sys.stderr)
        return
    _faulthandler_file.write(f"\n[{datetime.now().isoformat()}] Session started (v{_app_version})\n")
    _faulthandler_file.flush()
    faulthandler.enable(file=_faulthandler_file, all_threads=True)


def _cleanup_faulthandler() -> None:
    global _faulthandler_file
    if _faulthandler_file is not None:
        _faulthandler_file.write(f"[{datetime.now().isoformat()}] Clean exit\n")
        _faulthandler_file.close()
        _faulthandler_file = None


def _show_crash_dialog(crash_file: Optional[Path], traceback_text: str) -> None:
    app = QApplication.instance()
    if app is None:
        return
    if crash_file is not None:
        info_text = (
            f"A crash report has been saved to:\n{crash_file}\n\n"
            "Please include this file when reporting the issue."
        )
    else:
        info_text = "Could not save crash report. Please copy the details below when reporting the issue."
    msg = QMessageBox()
    msg.setIcon(QMessageBox.Icon.Critical)
    msg.setWindowTitle(f"{APP_TITLE} - Unexpected Error")
    msg.setText("The application encountered an unexpected error and needs to close.")
    msg.setInformativeText(info_text)
    msg.setDetailedText(traceback_text)
    msg.setWindowModality(Qt.WindowModality.ApplicationModal)
    msg.setWindowFlags(msg.windowFlags() | Qt.WindowType.WindowStaysOnTopHint)
    msg.exec()


def _crash_handler(exc_type, exc_value, exc_tb) -> None:
    report = format_crash_report(exc_type, exc_value, exc_tb, _app_version)
    print(report, file=sys.stderr)
    crash_file = write_crash_report(report)
    _show_crash_dialog(crash_file, "".join(traceback.format_exception(exc_type, exc_value, exc_tb)))
    _remove_unclean_exit_marker()
    sys.exit(1)


def install_crash_handler(app_version: str = "unknown") -> None:
    """
    Install Python, thread and native crash handling.

    Call early in startup, before any GUI code.
    """
    global _app_version
    _app_version = app_version
    _install_faulthandler()
    _create_unclean_exit_marker()
    atexit.register(_remove_unclean_exit_marker)
    atexit.register(_cleanup_faulthandler)
    threading.excepthook = _thread_excepthook
    sys.excepthook = _crash_handler


def install_qt_crash_handling() -> None:
    """Route Qt messages into the crash log. Call after QApplication exists."""
    qInstallMessageHandler(_qt_message_handler)
