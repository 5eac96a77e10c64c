"""
Grading review: the captured answer next to the AI verdict.

The widget does not call the grading service itself. It emits
gradeRequested and the main window runs the request on a worker thread,
then calls show_result() or show_error().
"""
import base64
import binascii
import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QGroupBox, QHBoxLayout, QLabel, QPushButton, QScrollArea, QSplitter, QToolButton,
    QVBoxLayout, QWidget
)

from grading_guru.core.models.exams import Exam
from grading_guru.core.models.grading import GradingResult
from grading_guru.gui.styles.theme import score_color
from grading_guru.gui.utils.icons import MaterialIcons

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.5
MAX_ZOOM = 2.0
ZOOM_STEP = 0.25


def pixmap_from_data_url(data_url: str) -> QPixmap:
    """Decode a base64 image data URL; returns a null pixmap if it cannot be read."""
    pixmap = QPixmap()
    _, _, payload = data_url.partition(",")
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Captured image is not valid base64")
        return pixmap
    pixmap.loadFromData(raw)
    return pixmap


def _wrapped(text: str, object_name: Optional[str] = None) -> QLabel:
    label = QLabel(text)
    label.setWordWrap(True)
    label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
    if object_name:
        label.setObjectName(object_name)
    return label


class GradingReview(QWidget):
    gradeRequested = Signal()
    backRequested = Signal()
    gradingCompleted = Signal(object)  # GradingResult

    def __init__(self, parent=None):
        super().__init__(parent)
        self._exam: Optional[Exam] = None
        self._image_data: Optional[str] = None
        self._pixmap = QPixmap()
        self._zoom = 1.0
        self._processing = False
        self._result: Optional[GradingResult] = None

        layout = QVBoxLayout(self)

        # --- Header ---
        header = QHBoxLayout()
        self.back_btn = QPushButton("Back to Capture")
        self.back_btn.clicked.connect(self.backRequested)
        header.addWidget(self.back_btn)
        self.exam_label = QLabel()
        self.exam_label.setObjectName("sectionTitle")
        header.addWidget(self.exam_label)
        header.addStretch()
        layout.addLayout(header)

        self.error_label = _wrapped("", "errorLabel")
        self.error_label.hide()
        layout.addWidget(self.error_label)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        # --- Left: student answer ---
        answer_box = QGroupBox("Student Answer")
        answer_layout = QVBoxLayout(answer_box)
        zoom_row = QHBoxLayout()
        zoom_row.addStretch()
        self.zoom_out_btn = QToolButton()
        self.zoom_out_btn.setIcon(MaterialIcons.zoom_out())
        self.zoom_out_btn.clicked.connect(self.zoom_out)
        zoom_row.addWidget(self.zoom_out_btn)
        self.zoom_label = QLabel()
        zoom_row.addWidget(self.zoom_label)
        self.zoom_in_btn = QToolButton()
        self.zoom_in_btn.setIcon(MaterialIcons.zoom_in())
        self.zoom_in_btn.clicked.connect(self.zoom_in)
        zoom_row.addWidget(self.zoom_in_btn)
        answer_layout.addLayout(zoom_row)

        self.image_label = QLabel()
        self.image_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        image_scroll = QScrollArea()
        image_scroll.setWidgetResizable(True)
        image_scroll.setWidget(self.image_label)
        answer_layout.addWidget(image_scroll)
        splitter.addWidget(answer_box)

        # --- Right: feedback ---
        feedback_box = QGroupBox("AI Feedback")
        feedback_layout = QVBoxLayout(feedback_box)
        self.status_label = QLabel()
        self.status_label.setObjectName("hintLabel")
        feedback_layout.addWidget(self.status_label)

        self.grade_btn = QPushButton("Grade with AI")
        self.grade_btn.setObjectName("primaryButton")
        self.grade_btn.setIcon(MaterialIcons.grade())
        self.grade_btn.clicked.connect(self.gradeRequested)
        feedback_layout.addWidget(self.grade_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.result_widget = QWidget()
        self.result_layout = QVBoxLayout(self.result_widget)
        self.result_layout.setContentsMargins(0, 0, 0, 0)
        result_scroll = QScrollArea()
        result_scroll.setWidgetResizable(True)
        result_scroll.setWidget(self.result_widget)
        feedback_layout.addWidget(result_scroll)

        self.complete_btn = QPushButton("Complete Grading")
        self.complete_btn.clicked.connect(self._complete)
        feedback_layout.addWidget(self.complete_btn, alignment=Qt.AlignmentFlag.AlignRight)
        splitter.addWidget(feedback_box)

        layout.addWidget(splitter)
        self._refresh()

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def result(self) -> Optional[GradingResult]:
        return self._result

    def set_context(self, exam: Optional[Exam], image_data: Optional[str]) -> None:
        """Show a new capture for an exam; clears any previous verdict."""
        self._exam = exam
        self._image_data = image_data
        self._pixmap = pixmap_from_data_url(image_data) if image_data else QPixmap()
        self._zoom = 1.0
        self._result = None
        self._processing = False
        self.error_label.hide()
        if exam is None:
            self.exam_label.setText("")
        elif exam.subject:
            self.exam_label.setText(f"{exam.title} - {exam.subject}")
        else:
            self.exam_label.setText(exam.title)
        self._clear_result()
        self._refresh()

    def set_processing(self, processing: bool) -> None:
        self._processing = processing
        if processing:
            self._result = None
            self.error_label.hide()
            self._clear_result()
        self._refresh()

    def show_result(self, result: GradingResult) -> None:
        self._processing = False
        self._result = result
        self.error_label.hide()
        self._render_result(result)
        self._refresh()

    def show_error(self, message: str) -> None:
        self._processing = False
        self._result = None
        self.error_label.setText(message)
        self.error_label.show()
        self._refresh()

    # ─────────────────────────────────────────────────────────────────────────
    # Zoom
    # ─────────────────────────────────────────────────────────────────────────

    def zoom_in(self) -> None:
        if self._zoom < MAX_ZOOM:
            self._zoom = min(self._zoom + ZOOM_STEP, MAX_ZOOM)
            self._refresh()

    def zoom_out(self) -> None:
        if self._zoom > MIN_ZOOM:
            self._zoom = max(self._zoom - ZOOM_STEP, MIN_ZOOM)
            self._refresh()

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def _refresh(self) -> None:
        self.zoom_label.setText(f"{round(self._zoom * 100)}%")
        self.zoom_out_btn.setEnabled(self._zoom > MIN_ZOOM and not self._processing)
        self.zoom_in_btn.setEnabled(self._zoom < MAX_ZOOM and not self._processing)
        if self._pixmap.isNull():
            self.image_label.setPixmap(QPixmap())
            self.image_label.setText("No image captured")
        else:
            self.image_label.setPixmap(
                self._pixmap.scaled(
                    self._pixmap.size() * self._zoom,
                    Qt.AspectRatioMode.KeepAspectRatio,
                    Qt.TransformationMode.SmoothTransformation,
                )
            )

        has_result = self._result is not None
        self.status_label.setText("Analyzing..." if self._processing else "")
        self.grade_btn.setVisible(not has_result)
        self.grade_btn.setEnabled(not self._processing)
        self.back_btn.setEnabled(not self._processing)
        self.complete_btn.setVisible(has_result and not self._processing)

    def _clear_result(self) -> None:
        while self.result_layout.count():
            item = self.result_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()

    def _add_section(self, title: str, lines) -> None:
        if not lines:
            return
        heading = QLabel(title)
        heading.setObjectName("sectionTitle")
        self.result_layout.addWidget(heading)
        for line in lines:
            self.result_layout.addWidget(_wrapped(f"• {line}"))

    def _render_result(self, result: GradingResult) -> None:
        self._clear_result()
        grading = result.grading

        score = _wrapped(result.score_label, "scoreLabel")
        score.setStyleSheet(f"color: {score_color(grading.final_score, grading.total_points_possible)};")
        self.result_layout.addWidget(score)
        self.result_layout.addWidget(_wrapped(f"Confidence: {result.confidence_percent:g}%", "hintLabel"))
        if result.matched_question.question:
            self.result_layout.addWidget(
                _wrapped(
                    f"Matched question ({result.matched_question.confidence * 100:g}%): "
                    f"{result.matched_question.question}",
                    "hintLabel",
                )
            )

        if result.feedback.detailed_comments:
            heading = QLabel("Detailed Feedback")
            heading.setObjectName("sectionTitle")
            self.result_layout.addWidget(heading)
            self.result_layout.addWidget(_wrapped(result.feedback.detailed_comments))

        if grading.schema_criteria:
            heading = QLabel("Marking Criteria")
            heading.setObjectName("sectionTitle")
            self.result_layout.addWidget(heading)
            for criterion in grading.schema_criteria:
                awarded = f"{criterion.points_awarded:g}/{criterion.points_possible:g}"
                self.result_layout.addWidget(_wrapped(f"{criterion.criterion}  ({awarded})"))
                if criterion.deduction_reason:
                    self.result_layout.addWidget(_wrapped(criterion.deduction_reason, "hintLabel"))

        self._add_section("Strengths", result.feedback.criteria_met)
        self._add_section("Areas for Improvement", result.feedback.criteria_unmet)
        self._add_section("Suggestions", result.feedback.improvements)
        if result.ocr_quality is not None:
            self._add_section("Legibility Issues", result.ocr_quality.issues)
            if result.ocr_quality.impact_on_grading:
                self.result_layout.addWidget(_wrapped(result.ocr_quality.impact_on_grading, "hintLabel"))
        self.result_layout.addStretch()

    def _complete(self) -> None:
        if self._result is not None:
            self.gradingCompleted.emit(self._result)
