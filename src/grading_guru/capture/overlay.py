"""
Full-screen selection overlay.

A frameless, translucent, always-on-top window covering the primary screen.
The user drags a rectangle with the left mouse button; Escape or a right
click cancels. Exactly one of selectionComplete / selectionCancelled is
emitted per overlay, and closed is emitted whenever the window closes.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QPoint, QRect, Qt, Signal
from PySide6.QtGui import QColor, QGuiApplication, QKeyEvent, QMouseEvent, QPainter, QPaintEvent, QPen
from PySide6.QtWidgets import QWidget

from grading_guru.core.models.bounds import SelectionBounds

logger = logging.getLogger(__name__)

DIM_COLOR = QColor(0, 0, 0, 90)
SELECTION_BORDER = QColor(59, 130, 246)
SELECTION_FILL = QColor(59, 130, 246, 40)


class SelectionOverlay(QWidget):
    """Drag-to-select overlay window."""

    selectionComplete = Signal(object)  # SelectionBounds
    selectionCancelled = Signal()
    closed = Signal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._origin: Optional[QPoint] = None
        self._current: Optional[QPoint] = None
        self._finished = False

        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, False)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.setCursor(Qt.CursorShape.CrossCursor)
        self.setWindowTitle("Select answer region")

        screen = QGuiApplication.primaryScreen()
        if screen is not None:
            geometry = screen.geometry()
            self.setGeometry(geometry)
            self.setFixedSize(geometry.size())

    # ─────────────────────────────────────────────────────────────────────────
    # Selection state
    # ─────────────────────────────────────────────────────────────────────────

    def selection_rect(self) -> QRect:
        """Current drag rectangle in widget coordinates (empty when not dragging)."""
        if self._origin is None or self._current is None:
            return QRect()
        # QRect(QPoint, QPoint) treats the corner as inclusive; use the drag span
        left = min(self._origin.x(), self._current.x())
        top = min(self._origin.y(), self._current.y())
        width = abs(self._current.x() - self._origin.x())
        height = abs(self._current.y() - self._origin.y())
        return QRect(left, top, width, height)

    def _to_bounds(self, rect: QRect) -> SelectionBounds:
        top_left = self.geometry().topLeft()
        if rect.isEmpty():
            width = height = 0
        else:
            width = rect.width()
            height = rect.height()
        return SelectionBounds(
            x=rect.x() + top_left.x(),
            y=rect.y() + top_left.y(),
            width=width,
            height=height,
        )

    def finish(self, bounds: Optional[SelectionBounds]) -> None:
        """Emit the single outcome of this overlay; later calls are ignored."""
        if self._finished:
            return
        self._finished = True
        if bounds is None or bounds.is_empty:
            logger.debug("Selection cancelled")
            self.selectionCancelled.emit()
        else:
            logger.debug(f"Selection complete: {bounds}")
            self.selectionComplete.emit(bounds)

    # ─────────────────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────────────────

    def showEvent(self, event):
        super().showEvent(event)
        self.activateWindow()
        self.raise_()
        self.setFocus()

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() == Qt.Key.Key_Escape:
            self.finish(None)
            return
        super().keyPressEvent(event)

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.RightButton:
            self.finish(None)
            return
        if event.button() == Qt.MouseButton.LeftButton:
            self._origin = event.position().toPoint()
            self._current = self._origin
            self.update()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._origin is not None:
            self._current = event.position().toPoint()
            self.update()
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton and self._origin is not None:
            self._current = event.position().toPoint()
            rect = self.selection_rect()
            self._origin = self._current = None
            self.update()
            self.finish(self._to_bounds(rect))
            return
        super().mouseReleaseEvent(event)

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.fillRect(self.rect(), DIM_COLOR)
        rect = self.selection_rect()
        if not rect.isEmpty():
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Clear)
            painter.fillRect(rect, Qt.GlobalColor.transparent)
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)
            painter.fillRect(rect, SELECTION_FILL)
            painter.setPen(QPen(SELECTION_BORDER, 2))
            painter.drawRect(rect)
            painter.drawText(
                rect.bottomLeft() + QPoint(4, 16),
                f"{rect.width()} x {rect.height()}",
            )
        painter.end()

    def closeEvent(self, event):
        logger.debug("Selection overlay closing")
        super().closeEvent(event)
        self.closed.emit()
