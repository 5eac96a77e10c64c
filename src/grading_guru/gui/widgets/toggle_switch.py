"""
Custom Toggle Switch Widget (iOS Style)

Used for the provider on/off switches in the AI settings panel.
"""
from PySide6.QtCore import Property, QEasingCurve, QPropertyAnimation, QRectF, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QPainter, QPen
from PySide6.QtWidgets import QWidget

from grading_guru.gui.styles.theme import get_colors


class ToggleSwitch(QWidget):
    """
    Two-state switch.

    `toggled` fires for programmatic and user changes; `clicked` only for
    user clicks, so a panel can tell a user toggle from a state refresh.
    """

    toggled = Signal(bool)
    clicked = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._checked = False
        self._thumb_pos = 0.0  # 0.0 = Left (Off), 1.0 = Right (On)

        self.setFixedSize(44, 24)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.update_theme()

        self._animation = QPropertyAnimation(self, b"thumb_pos", self)
        self._animation.setDuration(200)
        self._animation.setEasingCurve(QEasingCurve.Type.InOutQuad)

    @Property(float)
    def thumb_pos(self):
        return self._thumb_pos

    @thumb_pos.setter
    def thumb_pos(self, pos):
        self._thumb_pos = pos
        self.update()

    def isChecked(self):
        return self._checked

    def setChecked(self, checked: bool):
        if self._checked != checked:
            self._checked = checked
            self._start_animation()
            self.toggled.emit(checked)

    def _start_animation(self):
        self._animation.stop()
        self._animation.setStartValue(self._thumb_pos)
        self._animation.setEndValue(1.0 if self._checked else 0.0)
        self._animation.start()

    def mouseReleaseEvent(self, event):
        if not self.isEnabled():
            return
        # Ignore releases dragged off the widget
        if event.button() == Qt.MouseButton.LeftButton and self.rect().contains(event.position().toPoint()):
            self.clicked.emit()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        w, h = self.width(), self.height()
        thumb_size = h - 4

        if not self.isEnabled():
            color = self._track_color_disabled
        elif self._checked:
            color = self._track_color_on
        else:
            color = self._track_color_off
        painter.setBrush(QBrush(color))
        painter.setPen(Qt.PenStyle.NoPen)
        painter.drawRoundedRect(QRectF(0, 0, w, h), h / 2, h / 2)

        padding = 2
        thumb_x = padding + (w - thumb_size - 2 * padding) * self._thumb_pos
        painter.setBrush(QBrush(self._thumb_color))
        painter.setPen(QPen(QColor(0, 0, 0, 20), 1))
        painter.drawEllipse(QRectF(thumb_x, padding, thumb_size, thumb_size))
        painter.end()

    def update_theme(self):
        """Update colors when theme changes."""
        C = get_colors()
        self._track_color_off = QColor(C.BORDER)
        self._track_color_on = QColor(C.TOGGLE_BG)
        self._thumb_color = QColor(C.SURFACE)
        self._track_color_disabled = QColor(C.DISABLED_BG)
        self.update()
