"""
Entry point for the Grading Guru desktop app.
"""
import sys

from grading_guru import __version__
from grading_guru.gui.utils.paths import is_frozen

if is_frozen():
    # Install crash handler for compiled builds (captures unhandled exceptions)
    from grading_guru.gui.utils.crashlog import install_crash_handler
    install_crash_handler(app_version=__version__)

APP_NAME = "Grading Guru"


def run():
    """
    Main entry point for the GUI application.
    """
    from PySide6.QtWidgets import QApplication
    from grading_guru.gui.main_window import MainWindow
    from grading_guru.gui.models.settings import SettingsStore
    from grading_guru.gui.session import AppSession
    from grading_guru.gui.styles.theme import apply_theme
    from grading_guru.gui.utils.logging_utils import configure_logging
    from grading_guru.gui.utils.paths import get_settings_path

    configure_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_NAME)
    app.setOrganizationName(APP_NAME)
    app.setDesktopFileName(APP_NAME)

    # Install Qt-specific crash handling (must be after QApplication is created)
    from grading_guru.gui.utils.crashlog import (
        install_qt_crash_handling,
        check_previous_crash,
        show_previous_crash_dialog,
    )
    install_qt_crash_handling()

    previous_crash = check_previous_crash()
    if previous_crash:
        show_previous_crash_dialog(previous_crash)

    settings = SettingsStore(get_settings_path())

    # Check for malformed settings and prompt user to reset if needed
    if not settings.check_load_error():
        sys.exit(1)

    apply_theme(app, settings.get_dark_mode())

    session = AppSession(settings=settings)
    # macOS apps keep running with no windows open
    app.setQuitOnLastWindowClosed(not session.is_macos)
    window = MainWindow(settings, session)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
