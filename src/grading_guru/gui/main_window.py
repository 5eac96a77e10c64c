"""
Main window: exam sidebar, capture/grade workflow, exam editor, review and
the log console.
"""
import logging
import queue
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication, QComboBox, QDialog, QFileDialog, QHBoxLayout, QLabel, QListWidget,
    QListWidgetItem, QMainWindow, QMessageBox, QPushButton, QSplitter, QStackedWidget,
    QVBoxLayout, QWidget
)

from grading_guru import __version__
from grading_guru.capture.errors import CaptureError, CaptureInProgressError, is_quiet_capture_error
from grading_guru.capture.orchestrator import CaptureAttempt, CaptureOrchestrator
from grading_guru.core.models.exams import Exam
from grading_guru.core.models.grading import GradingResult
from grading_guru.core.schemas.validator import ValidationError
from grading_guru.core.utils.serialization import export_exams, import_exams, merge_exams
from grading_guru.grading.errors import GradingPreconditionError
from grading_guru.grading.request import GradingRequest
from grading_guru.grading.service import GradingService
from grading_guru.gui.commands import CommandRouter, HostCommand
from grading_guru.gui.models.settings import SettingsStore
from grading_guru.gui.session import AppSession
from grading_guru.gui.styles.theme import apply_theme
from grading_guru.gui.utils.icons import MaterialIcons
from grading_guru.gui.utils.logging_utils import attach_queue_handler, detach_queue_handler
from grading_guru.gui.utils.paths import get_user_document_dir
from grading_guru.gui.widgets.ai_settings_panel import AISettingsPanel
from grading_guru.gui.widgets.console_widget import ConsoleWidget
from grading_guru.gui.widgets.exam_editor import ExamEditor
from grading_guru.gui.widgets.grading_review import GradingReview, pixmap_from_data_url
from grading_guru.gui.window_commands import WindowCommands
from grading_guru.gui.workers import GradingWorker

logger = logging.getLogger(__name__)

PAGE_CAPTURE = 0
PAGE_EXAM = 1
PAGE_REVIEW = 2

PREVIEW_MAX_HEIGHT = 360
WORKER_SHUTDOWN_TIMEOUT_MS = 1000


def _format_exam_date(iso_date: str) -> str:
    return iso_date[:10] if iso_date else ""


class SettingsDialog(QDialog):
    def __init__(self, settings: SettingsStore, parent=None):
        super().__init__(parent)
        self.setWindowTitle("AI Model Settings")
        self.setMinimumWidth(480)
        layout = QVBoxLayout(self)
        self.panel = AISettingsPanel(settings.get_ai_settings())
        self.panel.saveRequested.connect(settings.set_ai_settings)
        layout.addWidget(self.panel)


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: SettingsStore,
        session: Optional[AppSession] = None,
        orchestrator: Optional[CaptureOrchestrator] = None,
        grading_service: Optional[GradingService] = None,
    ):
        super().__init__()
        self.settings = settings
        self.session = session or AppSession(settings=settings)
        self.session.attach_window(self)
        self.window_commands = WindowCommands(self.session)
        self.orchestrator = orchestrator or CaptureOrchestrator(self.session, self.window_commands, parent=self)
        self.router = CommandRouter(self.window_commands, self.orchestrator)
        self.grading_service = grading_service or GradingService()

        self._exams: List[Exam] = settings.get_exams()
        self._captured_image: Optional[str] = None
        self._grading_worker: Optional[GradingWorker] = None

        self.setWindowTitle("Grading Guru")
        self.resize(1280, 860)
        self.setMinimumSize(960, 640)

        # Logging into the console
        self.log_queue = queue.Queue()
        self._log_handler = attach_queue_handler(self.log_queue)
        self.log_timer = QTimer(self)
        self.log_timer.timeout.connect(self._drain_log_queue)
        self.log_timer.start(100)

        self._build_menus()

        # --- Sidebar ---
        sidebar = QWidget()
        sidebar_layout = QVBoxLayout(sidebar)
        self.new_exam_btn = QPushButton("New Exam")
        self.new_exam_btn.setIcon(MaterialIcons.plus())
        self.new_exam_btn.clicked.connect(self.create_exam)
        sidebar_layout.addWidget(self.new_exam_btn)
        self.exam_list = QListWidget()
        self.exam_list.itemClicked.connect(self._on_exam_item_clicked)
        sidebar_layout.addWidget(self.exam_list)
        self.empty_label = QLabel("No exams yet")
        self.empty_label.setObjectName("hintLabel")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        sidebar_layout.addWidget(self.empty_label)
        sidebar.setMinimumWidth(220)

        # --- Pages ---
        self.stack = QStackedWidget()
        self.stack.addWidget(self._build_capture_page())

        self.exam_editor = ExamEditor()
        self.exam_editor.examSaved.connect(self.save_exam)
        self.stack.addWidget(self.exam_editor)

        self.review = GradingReview()
        self.review.gradeRequested.connect(self.start_grading)
        self.review.backRequested.connect(lambda: self.stack.setCurrentIndex(PAGE_CAPTURE))
        self.review.gradingCompleted.connect(self._on_grading_completed)
        self.stack.addWidget(self.review)

        content_splitter = QSplitter(Qt.Orientation.Horizontal)
        content_splitter.addWidget(sidebar)
        content_splitter.addWidget(self.stack)
        content_splitter.setStretchFactor(0, 0)
        content_splitter.setStretchFactor(1, 1)

        # --- Console ---
        self.console = ConsoleWidget()
        self.splitter = QSplitter(Qt.Orientation.Vertical)
        self.splitter.setChildrenCollapsible(False)
        self.splitter.addWidget(content_splitter)
        self.splitter.addWidget(self.console)
        self.splitter.setStretchFactor(0, 4)
        self.splitter.setStretchFactor(1, 1)
        self.setCentralWidget(self.splitter)

        self._restore_state()
        self._refresh_exam_views()
        self._update_grade_enabled()

    # ─────────────────────────────────────────────────────────────────────────
    # Construction
    # ─────────────────────────────────────────────────────────────────────────

    def _build_menus(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("File")
        new_action = QAction("New Exam", self)
        new_action.setShortcut(QKeySequence.StandardKey.New)
        new_action.triggered.connect(self.create_exam)
        file_menu.addAction(new_action)
        import_action = QAction(MaterialIcons.file_import(), "Import Exams...", self)
        import_action.triggered.connect(self._import_exams)
        file_menu.addAction(import_action)
        export_action = QAction(MaterialIcons.file_export(), "Export Exams...", self)
        export_action.triggered.connect(self._export_exams)
        file_menu.addAction(export_action)
        file_menu.addSeparator()
        settings_action = QAction(MaterialIcons.settings(), "AI Model Settings...", self)
        settings_action.triggered.connect(self.open_settings)
        file_menu.addAction(settings_action)
        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(lambda: self.router.invoke(HostCommand.WINDOW_CLOSE))
        file_menu.addAction(quit_action)

        capture_menu = menu_bar.addMenu("Capture")
        capture_action = QAction(MaterialIcons.capture(color="#666666"), "Capture Screen Region", self)
        capture_action.setShortcut(QKeySequence("Ctrl+Shift+C"))
        capture_action.triggered.connect(self.start_capture)
        capture_menu.addAction(capture_action)

        view_menu = menu_bar.addMenu("View")
        self.dark_mode_action = QAction("Dark Mode", self)
        self.dark_mode_action.setCheckable(True)
        self.dark_mode_action.setChecked(self.settings.get_dark_mode())
        self.dark_mode_action.toggled.connect(self._toggle_theme)
        view_menu.addAction(self.dark_mode_action)
        self.console_action = QAction("Show Console", self)
        self.console_action.setCheckable(True)
        self.console_action.setChecked(self.settings.get_console_visible())
        self.console_action.toggled.connect(self._toggle_console)
        view_menu.addAction(self.console_action)

        window_menu = menu_bar.addMenu("Window")
        for label, command in (
            ("Minimize", HostCommand.WINDOW_MINIMIZE),
            ("Maximize", HostCommand.WINDOW_MAXIMIZE),
            ("Restore", HostCommand.WINDOW_RESTORE),
            ("Close", HostCommand.WINDOW_CLOSE),
        ):
            action = QAction(label, self)
            action.triggered.connect(lambda _checked=False, c=command: self.router.invoke(c))
            window_menu.addAction(action)

        help_menu = menu_bar.addMenu("Help")
        about_action = QAction("About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _build_capture_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        title = QLabel("Capture & Grade")
        title.setObjectName("sectionTitle")
        layout.addWidget(title)

        exam_row = QHBoxLayout()
        exam_row.addWidget(QLabel("Exam"))
        self.grading_exam_combo = QComboBox()
        self.grading_exam_combo.currentIndexChanged.connect(lambda _i: self._update_grade_enabled())
        exam_row.addWidget(self.grading_exam_combo, 1)
        layout.addLayout(exam_row)

        self.preview_label = QLabel("No screenshot captured yet")
        self.preview_label.setObjectName("hintLabel")
        self.preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.preview_label.setMinimumHeight(200)
        layout.addWidget(self.preview_label, 1)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.capture_btn = QPushButton("Capture Screen")
        self.capture_btn.setObjectName("primaryButton")
        self.capture_btn.setIcon(MaterialIcons.capture())
        self.capture_btn.clicked.connect(self.start_capture)
        buttons.addWidget(self.capture_btn)
        self.grade_btn = QPushButton("Grade")
        self.grade_btn.setObjectName("primaryButton")
        self.grade_btn.setIcon(MaterialIcons.grade())
        self.grade_btn.clicked.connect(self.open_review)
        buttons.addWidget(self.grade_btn)
        layout.addLayout(buttons)
        return page

    def _restore_state(self):
        geometry = self.settings.get_window_geometry()
        if geometry:
            self.restoreGeometry(bytes.fromhex(geometry))
        splitter_state = self.settings.get_splitter_state()
        if splitter_state:
            self.splitter.restoreState(bytes.fromhex(splitter_state))
        self.console.setVisible(self.settings.get_console_visible())

    # ─────────────────────────────────────────────────────────────────────────
    # Exams
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def exams(self) -> List[Exam]:
        return list(self._exams)

    def selected_grading_exam(self) -> Optional[Exam]:
        exam_id = self.grading_exam_combo.currentData()
        return next((e for e in self._exams if e.id == exam_id), None)

    def _confirm_discard(self, action: str) -> bool:
        if not self.exam_editor.is_dirty:
            return True
        answer = QMessageBox.question(
            self,
            "Unsaved Changes",
            f"You have unsaved changes. Are you sure you want to {action}?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def create_exam(self):
        if not self._confirm_discard("create a new exam"):
            return
        self.exam_editor.set_exam(Exam.new())
        self.exam_list.clearSelection()
        self.stack.setCurrentIndex(PAGE_EXAM)

    def edit_exam(self, exam_id: str):
        exam = next((e for e in self._exams if e.id == exam_id), None)
        if exam is None:
            return
        current = self.exam_editor.exam
        if current is not None and current.id == exam_id and self.stack.currentIndex() == PAGE_EXAM:
            return
        if not self._confirm_discard("switch exams"):
            return
        self.exam_editor.set_exam(exam)
        self.settings.set_selected_exam_id(exam_id)
        self.stack.setCurrentIndex(PAGE_EXAM)

    def save_exam(self, exam: Exam):
        if not exam.title.strip():
            QMessageBox.warning(self, "Save Exam", "Exam title is required")
            return
        self._exams = self.settings.upsert_exam(exam)
        logger.info(f"Saved exam {exam.title!r} ({len(exam.questions)} questions)")
        self.exam_editor.set_exam(None)
        self._refresh_exam_views(select_id=exam.id)
        self.stack.setCurrentIndex(PAGE_CAPTURE)

    def _on_exam_item_clicked(self, item: QListWidgetItem):
        self.edit_exam(item.data(Qt.ItemDataRole.UserRole))

    def _refresh_exam_views(self, select_id: Optional[str] = None):
        current_grading_id = select_id or self.grading_exam_combo.currentData() or self.settings.get_selected_exam_id()

        self.exam_list.clear()
        for exam in self._exams:
            item = QListWidgetItem(f"{exam.title}\n{_format_exam_date(exam.date)}")
            item.setData(Qt.ItemDataRole.UserRole, exam.id)
            self.exam_list.addItem(item)
        self.empty_label.setVisible(not self._exams)

        self.grading_exam_combo.blockSignals(True)
        self.grading_exam_combo.clear()
        self.grading_exam_combo.addItem("Select an exam...", None)
        for exam in self._exams:
            self.grading_exam_combo.addItem(exam.title, exam.id)
        index = self.grading_exam_combo.findData(current_grading_id) if current_grading_id else -1
        self.grading_exam_combo.setCurrentIndex(max(index, 0))
        self.grading_exam_combo.blockSignals(False)
        self._update_grade_enabled()

    def _import_exams(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Import Exams", str(get_user_document_dir()), "Exam Library (*.json);;All Files (*)"
        )
        if not path:
            return
        try:
            incoming = import_exams(Path(path))
        except (ValidationError, OSError) as e:
            logger.error(f"Import failed: {e}")
            QMessageBox.critical(self, "Import Failed", f"Could not import exams:\n{e}")
            return
        self._exams = merge_exams(self._exams, incoming)
        self.settings.set_exams(self._exams)
        self._refresh_exam_views()
        logger.info(f"Imported {len(incoming)} exams from {path}")

    def _export_exams(self):
        if not self._exams:
            QMessageBox.information(self, "Export Exams", "There are no exams to export.")
            return
        default = get_user_document_dir() / "exams.json"
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Exams", str(default), "Exam Library (*.json);;All Files (*)"
        )
        if not path:
            return
        try:
            export_exams(Path(path), self._exams)
        except OSError as e:
            logger.error(f"Export failed: {e}")
            QMessageBox.critical(self, "Export Failed", f"Could not export exams:\n{e}")

    # ─────────────────────────────────────────────────────────────────────────
    # Capture
    # ─────────────────────────────────────────────────────────────────────────

    def start_capture(self) -> Optional[CaptureAttempt]:
        try:
            attempt = self.router.invoke(HostCommand.CAPTURE_SCREEN)
        except CaptureInProgressError:
            logger.info("Capture already in progress")
            return None
        self.capture_btn.setEnabled(False)
        attempt.succeeded.connect(self._on_capture_succeeded)
        attempt.failed.connect(self._on_capture_failed)
        return attempt

    def _on_capture_succeeded(self, data_url: str):
        self.capture_btn.setEnabled(True)
        self._captured_image = data_url
        pixmap = pixmap_from_data_url(data_url)
        if not pixmap.isNull():
            self.preview_label.setPixmap(
                pixmap.scaledToHeight(
                    min(pixmap.height(), PREVIEW_MAX_HEIGHT),
                    Qt.TransformationMode.SmoothTransformation,
                )
            )
        self.stack.setCurrentIndex(PAGE_CAPTURE)
        self._update_grade_enabled()
        logger.info("Screen captured")

    def _on_capture_failed(self, error: CaptureError):
        self.capture_btn.setEnabled(True)
        if is_quiet_capture_error(error):
            return
        QMessageBox.warning(self, "Capture Failed", f"Failed to capture screen. Please try again.\n\n{error}")

    # ─────────────────────────────────────────────────────────────────────────
    # Grading
    # ─────────────────────────────────────────────────────────────────────────

    def _update_grade_enabled(self):
        busy = self._grading_worker is not None
        self.grade_btn.setEnabled(not busy)
        self.grade_btn.setText("Processing..." if busy else "Grade")

    def open_review(self):
        exam = self.selected_grading_exam()
        if exam is None:
            QMessageBox.information(self, "Grade", "Please select an exam first")
            return
        if not self._captured_image:
            QMessageBox.information(self, "Grade", "Please capture a screenshot first")
            return
        self.review.set_context(exam, self._captured_image)
        self.stack.setCurrentIndex(PAGE_REVIEW)

    def start_grading(self):
        if self._grading_worker is not None:
            return
        request = GradingRequest.for_exam(self.selected_grading_exam(), self._captured_image)
        try:
            request.validate()
        except GradingPreconditionError as e:
            self.review.show_error(str(e))
            return

        self.review.set_processing(True)
        worker = GradingWorker(request, self.settings.get_ai_settings(), service=self.grading_service)
        worker.succeeded.connect(self._on_grading_succeeded)
        worker.failed.connect(self._on_grading_failed)
        worker.finished.connect(self._on_grading_finished)
        self._grading_worker = worker
        self._update_grade_enabled()
        worker.start()

    def _on_grading_succeeded(self, result: GradingResult):
        self.review.show_result(result)

    def _on_grading_failed(self, message: str):
        self.review.show_error(message)

    def _on_grading_finished(self):
        worker, self._grading_worker = self._grading_worker, None
        if worker is not None:
            worker.deleteLater()
        self._update_grade_enabled()

    def _on_grading_completed(self, result: GradingResult):
        logger.info(f"Grading complete: {result.score_label}")
        self.stack.setCurrentIndex(PAGE_CAPTURE)

    # ─────────────────────────────────────────────────────────────────────────
    # Settings & misc
    # ─────────────────────────────────────────────────────────────────────────

    def open_settings(self):
        SettingsDialog(self.settings, self).exec()

    def _toggle_theme(self, checked: bool):
        self.settings.set_dark_mode(checked)
        apply_theme(QApplication.instance(), checked)
        self.console.update_theme()

    def _toggle_console(self, checked: bool):
        self.console.setVisible(checked)
        self.settings.set_console_visible(checked)

    def _drain_log_queue(self):
        while True:
            try:
                text, level = self.log_queue.get_nowait()
            except queue.Empty:
                break
            self.console.append_log(level, text)

    def _show_about(self):
        QMessageBox.about(
            self,
            "About Grading Guru",
            "<h3>Grading Guru</h3>"
            f"<p>Version: {__version__}</p>"
            "<p>Capture a student's answer from the screen and grade it against "
            "your exam's marking schema with AI.</p>",
        )

    def closeEvent(self, event):
        """Save UI state on close."""
        self.orchestrator.cancel()
        worker, self._grading_worker = self._grading_worker, None
        if worker is not None:
            worker.succeeded.disconnect(self._on_grading_succeeded)
            worker.failed.disconnect(self._on_grading_failed)
            worker.finished.disconnect(self._on_grading_finished)
            if not worker.wait(WORKER_SHUTDOWN_TIMEOUT_MS):
                logger.warning("Grading request still running at shutdown; its result will be discarded")
                # Hand the thread to the application so it outlives this window
                worker.setParent(QApplication.instance())
                worker.finished.connect(worker.deleteLater)
        self.log_timer.stop()
        detach_queue_handler(self._log_handler)
        self.settings.set_window_geometry(self.saveGeometry().toHex().data().decode())
        self.settings.set_splitter_state(self.splitter.saveState().toHex().data().decode())
        super().closeEvent(event)
