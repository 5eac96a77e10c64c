"""Unit tests for the grading worker thread."""

from unittest.mock import MagicMock

from grading_guru.core.models.grading import GradingResult
from grading_guru.grading.config import AISettings
from grading_guru.grading.errors import ProviderNotConfiguredError
from grading_guru.grading.request import GradingRequest
from grading_guru.gui.workers import GradingWorker


def _worker(sample_exam, sample_data_url, service):
    request = GradingRequest.for_exam(sample_exam, sample_data_url)
    return GradingWorker(request, AISettings(), service=service)


def test_worker_when_service_succeeds_then_result_emitted(qtbot, sample_exam, sample_data_url):
    service = MagicMock()
    service.grade.return_value = GradingResult()
    worker = _worker(sample_exam, sample_data_url, service)

    with qtbot.waitSignal(worker.succeeded, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == [service.grade.return_value]


def test_worker_when_grading_error_then_message_emitted(qtbot, sample_exam, sample_data_url):
    service = MagicMock()
    service.grade.side_effect = ProviderNotConfiguredError()
    worker = _worker(sample_exam, sample_data_url, service)

    with qtbot.waitSignal(worker.failed, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == ["No AI provider configured. Please configure an AI provider in settings."]


def test_worker_when_unexpected_error_then_prefixed_message(qtbot, sample_exam, sample_data_url):
    service = MagicMock()
    service.grade.side_effect = KeyError("boom")
    worker = _worker(sample_exam, sample_data_url, service)

    with qtbot.waitSignal(worker.failed, timeout=5000) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args[0].startswith("Unexpected error during grading:")
