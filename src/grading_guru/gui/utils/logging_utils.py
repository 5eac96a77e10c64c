"""
Logging setup and the bridge that shows log records in the GUI console.
"""
from __future__ import annotations

import logging
import os
from queue import Queue
from typing import Optional

LOG_LEVEL_ENV = "GRADING_GURU_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_log_level(value: Optional[str] = None) -> int:
    """
    Map a level name (e.g. "debug") to a logging level.

    Reads GRADING_GURU_LOG_LEVEL when no value is given; unknown names
    fall back to INFO.
    """
    name = (value if value is not None else os.environ.get(LOG_LEVEL_ENV, "")).strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None) -> None:
    """Configure root logging for the application process."""
    logging.basicConfig(level=level if level is not None else resolve_log_level(), format=LOG_FORMAT)
    # The OpenAI SDK logs every HTTP request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


class QueueLogHandler(logging.Handler):
    """
    A logging handler that sends (message, level) pairs to a queue.

    The main window drains the queue on a timer, so records emitted from the
    grading worker thread never touch widgets directly.
    """

    def __init__(self, log_queue: Queue, level: int = logging.INFO):
        super().__init__(level)
        self.log_queue = log_queue
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = record.levelname
            if level == "DEBUG":
                level = "INFO"
            self.log_queue.put((self.format(record), level))
        except Exception:
            self.handleError(record)


def attach_queue_handler(log_queue: Queue, logger_name: Optional[str] = None) -> QueueLogHandler:
    """
    Attach a QueueLogHandler to the named logger (root logger if None).

    Returns:
        The attached handler, for detach_queue_handler().
    """
    handler = QueueLogHandler(log_queue)
    logging.getLogger(logger_name).addHandler(handler)
    return handler


def detach_queue_handler(handler: QueueLogHandler, logger_name: Optional[str] = None) -> None:
    logging.getLogger(logger_name).removeHandler(handler)
