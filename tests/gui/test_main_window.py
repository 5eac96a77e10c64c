"""Integration tests for the main window workflow (capture, edit, grade)."""

import logging
import threading
import time
from unittest.mock import MagicMock

import pytest
from PySide6.QtCore import QObject, Signal

from grading_guru.capture.orchestrator import CaptureOrchestrator
from grading_guru.core.models.bounds import SelectionBounds
from grading_guru.core.models.grading import GradingBreakdown, GradingResult
from grading_guru.gui import main_window as main_window_module
from grading_guru.gui.main_window import PAGE_CAPTURE, PAGE_EXAM, PAGE_REVIEW, MainWindow
from grading_guru.gui.models.settings import SettingsStore
from grading_guru.gui.session import AppSession
from grading_guru.gui.window_commands import WindowCommands


class FakeOverlay(QObject):
    selectionComplete = Signal(object)
    selectionCancelled = Signal()
    closed = Signal()

    def show(self):
        pass

    def hide(self):
        pass

    def close(self):
        pass


@pytest.fixture
def message_boxes(monkeypatch):
    """Record QMessageBox calls instead of opening modal dialogs."""
    calls = []

    class RecordingBox:
        StandardButton = main_window_module.QMessageBox.StandardButton

        @staticmethod
        def information(parent, title, text):
            calls.append(("information", text))

        @staticmethod
        def warning(parent, title, text):
            calls.append(("warning", text))

        @staticmethod
        def critical(parent, title, text):
            calls.append(("critical", text))

    monkeypatch.setattr(main_window_module, "QMessageBox", RecordingBox)
    return calls


@pytest.fixture
def store(tmp_path, sample_exam):
    settings = SettingsStore(tmp_path / "gui_settings.json")
    settings.set_exams([sample_exam])
    return settings


@pytest.fixture
def overlays():
    return []


@pytest.fixture
def grading_service():
    service = MagicMock()
    service.grade.return_value = GradingResult(grading=GradingBreakdown(final_score=2, total_points_possible=3))
    return service


@pytest.fixture
def window(qtbot, store, overlays, sample_data_url, grading_service, message_boxes):
    session = AppSession(settings=store)
    grabber = MagicMock()
    grabber.grab.return_value = sample_data_url

    def overlay_factory():
        overlay = FakeOverlay()
        overlays.append(overlay)
        return overlay

    orchestrator = CaptureOrchestrator(
        session,
        WindowCommands(session),
        overlay_factory=overlay_factory,
        grabber=grabber,
        settle_delay_ms=0,
    )
    w = MainWindow(store, session, orchestrator=orchestrator, grading_service=grading_service)
    qtbot.addWidget(w)
    w.show()
    return w


def _capture(qtbot, window, overlays):
    attempt = window.start_capture()
    with qtbot.waitSignal(attempt.succeeded, timeout=2000):
        overlays[-1].selectionComplete.emit(SelectionBounds(0, 0, 40, 20))
    return attempt


class TestMainWindow:

    def test_init_when_exams_stored_then_listed(self, window):
        assert window.session.main_window is window
        assert window.exam_list.count() == 1
        assert window.grading_exam_combo.count() == 2  # placeholder + exam

    def test_grade_when_no_exam_selected_then_prompted(self, window, message_boxes):
        window.grading_exam_combo.setCurrentIndex(0)
        window.open_review()
        assert message_boxes == [("information", "Please select an exam first")]
        assert window.stack.currentIndex() == PAGE_CAPTURE

    def test_grade_when_no_capture_then_prompted(self, window, message_boxes):
        window.grading_exam_combo.setCurrentIndex(1)
        window.open_review()
        assert message_boxes == [("information", "Please capture a screenshot first")]

    def test_capture_when_selection_made_then_preview_shown(self, qtbot, window, overlays):
        _capture(qtbot, window, overlays)
        assert window.capture_btn.isEnabled()
        assert window.preview_label.pixmap() is not None
        assert not window.preview_label.pixmap().isNull()

    def test_capture_when_cancelled_then_no_dialog(self, qtbot, window, overlays, message_boxes):
        attempt = window.start_capture()
        with qtbot.waitSignal(attempt.failed, timeout=1000):
            overlays[-1].selectionCancelled.emit()
        assert message_boxes == []
        assert window.capture_btn.isEnabled()

    def test_capture_when_already_pending_then_ignored(self, window, overlays):
        assert window.start_capture() is not None
        assert window.start_capture() is None
        assert len(overlays) == 1

    def test_grading_when_capture_and_exam_ready_then_result_shown(
        self, qtbot, window, overlays, grading_service
    ):
        _capture(qtbot, window, overlays)
        window.grading_exam_combo.setCurrentIndex(1)
        window.open_review()
        assert window.stack.currentIndex() == PAGE_REVIEW

        window.review.grade_btn.click()
        qtbot.waitUntil(lambda: window.review.result is not None, timeout=5000)
        qtbot.waitUntil(lambda: window._grading_worker is None, timeout=5000)

        request, ai_settings = grading_service.grade.call_args.args
        assert request.exam.id == "exam-1"
        assert request.image_data.startswith("data:image/png;base64,")
        assert window.review.result.score_label == "2/3"

    def test_new_exam_when_saved_then_stored_and_listed(self, window, store):
        window.create_exam()
        assert window.stack.currentIndex() == PAGE_EXAM
        window.exam_editor.title_edit.setText("Quiz 2")
        window.exam_editor.save()

        assert [e.title for e in store.get_exams()] == ["Mechanics Midterm", "Quiz 2"]
        assert window.exam_list.count() == 2
        assert window.stack.currentIndex() == PAGE_CAPTURE

    def test_close_when_window_closed_then_state_saved(self, window, store):
        window.close()
        assert store.get_window_geometry()
        assert store.get_splitter_state()

    def test_close_when_grading_still_running_then_does_not_block(
        self, qtbot, window, overlays, grading_service, monkeypatch, caplog
    ):
        release = threading.Event()

        def slow_grade(request, ai_settings):
            release.wait(10)
            return GradingResult()

        grading_service.grade.side_effect = slow_grade
        monkeypatch.setattr(main_window_module, "WORKER_SHUTDOWN_TIMEOUT_MS", 50)
        _capture(qtbot, window, overlays)
        window.grading_exam_combo.setCurrentIndex(1)
        window.open_review()
        window.review.grade_btn.click()
        worker = window._grading_worker
        assert worker is not None and worker.isRunning()

        start = time.monotonic()
        with caplog.at_level(logging.WARNING, logger="grading_guru.gui.main_window"):
            window.close()
        assert time.monotonic() - start < 5
        assert "still running at shutdown" in caplog.text

        release.set()
        assert worker.wait(5000)
