"""
Background workers for the GUI.
"""
import logging
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal

from grading_guru.grading.config import AISettings
from grading_guru.grading.errors import GradingError
from grading_guru.grading.request import GradingRequest
from grading_guru.grading.service import GradingService

logger = logging.getLogger(__name__)


class GradingWorker(QThread):
    """
    Runs one grading request off the GUI thread.

    Exactly one of `succeeded` or `failed` is emitted per run. `failed`
    carries a user-facing message.
    """

    succeeded = Signal(object)  # GradingResult
    failed = Signal(str)

    def __init__(
        self,
        request: GradingRequest,
        ai_settings: Optional[AISettings],
        service: Optional[GradingService] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.request = request
        self.ai_settings = ai_settings
        self.service = service or GradingService()

    def run(self):
        try:
            result = self.service.grade(self.request, self.ai_settings)
        except GradingError as e:
            logger.error(f"Grading failed: {e}")
            self.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error during grading")
            self.failed.emit(f"Unexpected error during grading: {e}")
            return
        self.succeeded.emit(result)
