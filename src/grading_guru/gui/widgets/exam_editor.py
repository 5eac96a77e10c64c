"""
Exam editor: title, subject, level, harshness and the question list.

Every edit is applied to an immutable Exam held by the editor; the stored
library is only touched when the user saves.
"""
import logging
from typing import Dict, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit,
    QPushButton, QScrollArea, QToolButton, QVBoxLayout, QWidget
)

from grading_guru.core.models.exams import EXAM_LEVELS, HARSHNESS_LEVELS, Exam, Question
from grading_guru.gui.utils.icons import MaterialIcons

logger = logging.getLogger(__name__)

# Question field name -> (label, placeholder, editor height)
QUESTION_FIELDS = {
    "question": ("Question", "Enter question...", 70),
    "example_answer": ("Example Answer", "Enter example answer...", 120),
    "marking_schema": ("Marking Schema", "Enter marking schema...", 180),
}


def _label_for(value: str) -> str:
    return value[:1].upper() + value[1:]


class QuestionCard(QGroupBox):
    """Editable card for one question."""

    fieldChanged = Signal(str, str, str)  # question_id, field, text
    deleteRequested = Signal(str)

    def __init__(self, question: Question, number: int, parent=None):
        super().__init__(parent)
        self.question_id = question.id
        self.editors: Dict[str, QPlainTextEdit] = {}

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        self.title_label = QLabel()
        header.addWidget(self.title_label)
        header.addStretch()
        self.delete_btn = QToolButton()
        self.delete_btn.setIcon(MaterialIcons.delete())
        self.delete_btn.setToolTip("Delete question")
        self.delete_btn.clicked.connect(lambda: self.deleteRequested.emit(self.question_id))
        header.addWidget(self.delete_btn)
        layout.addLayout(header)

        for field_name, (label, placeholder, height) in QUESTION_FIELDS.items():
            layout.addWidget(QLabel(label))
            editor = QPlainTextEdit(getattr(question, field_name))
            editor.setPlaceholderText(placeholder)
            editor.setMinimumHeight(height)
            editor.textChanged.connect(
                lambda name=field_name, ed=editor: self.fieldChanged.emit(
                    self.question_id, name, ed.toPlainText()
                )
            )
            layout.addWidget(editor)
            self.editors[field_name] = editor

        self.set_number(number)

    def set_number(self, number: int) -> None:
        self.title_label.setText(f"Question {number}")


class ExamEditor(QWidget):
    """Form for one exam. Emits examSaved with the edited Exam."""

    examSaved = Signal(object)  # Exam
    dirtyChanged = Signal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._exam: Optional[Exam] = None
        self._dirty = False
        self._loading = False
        self._cards: Dict[str, QuestionCard] = {}

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)
        content = QWidget()
        self._content_layout = QVBoxLayout(content)

        # --- Exam settings ---
        settings_box = QGroupBox("Exam Settings")
        form = QFormLayout(settings_box)
        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Exam Title")
        form.addRow("Title", self.title_edit)

        self.subject_edit = QLineEdit()
        self.subject_edit.setPlaceholderText("e.g., Mathematics, Physics")
        form.addRow("Subject", self.subject_edit)

        self.level_combo = QComboBox()
        self.level_combo.addItem("Select Level", None)
        for level in EXAM_LEVELS:
            self.level_combo.addItem(_label_for(level), level)
        form.addRow("Level", self.level_combo)

        self.harshness_combo = QComboBox()
        for harshness in HARSHNESS_LEVELS:
            self.harshness_combo.addItem(_label_for(harshness), harshness)
        form.addRow("Grading Harshness", self.harshness_combo)
        self._content_layout.addWidget(settings_box)

        # --- Questions ---
        questions_header = QHBoxLayout()
        title = QLabel("Questions")
        title.setObjectName("sectionTitle")
        questions_header.addWidget(title)
        questions_header.addStretch()
        self.add_question_btn = QPushButton("Add Question")
        self.add_question_btn.setIcon(MaterialIcons.plus())
        self.add_question_btn.clicked.connect(self.add_question)
        questions_header.addWidget(self.add_question_btn)
        self._content_layout.addLayout(questions_header)

        self._questions_layout = QVBoxLayout()
        self._content_layout.addLayout(self._questions_layout)
        self._content_layout.addStretch()

        scroll.setWidget(content)
        outer.addWidget(scroll)

        footer = QHBoxLayout()
        footer.addStretch()
        self.save_btn = QPushButton("Save Exam")
        self.save_btn.setObjectName("primaryButton")
        self.save_btn.setIcon(MaterialIcons.content_save(color="#ffffff"))
        self.save_btn.clicked.connect(self.save)
        footer.addWidget(self.save_btn)
        outer.addLayout(footer)

        self.title_edit.textChanged.connect(self._on_title_changed)
        self.subject_edit.textChanged.connect(lambda text: self._apply(subject=text))
        self.level_combo.currentIndexChanged.connect(
            lambda _i: self._apply(level=self.level_combo.currentData())
        )
        self.harshness_combo.currentIndexChanged.connect(
            lambda _i: self._apply(harshness=self.harshness_combo.currentData())
        )

        self.setEnabled(False)

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def exam(self) -> Optional[Exam]:
        """The exam with all unsaved edits applied."""
        return self._exam

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def set_exam(self, exam: Optional[Exam]) -> None:
        """Load an exam into the form, discarding unsaved edits."""
        self._loading = True
        try:
            self._exam = exam
            self._clear_cards()
            self.setEnabled(exam is not None)
            if exam is None:
                self.title_edit.clear()
                self.subject_edit.clear()
                self.level_combo.setCurrentIndex(0)
                self.harshness_combo.setCurrentIndex(0)
            else:
                self.title_edit.setText(exam.title)
                self.subject_edit.setText(exam.subject or "")
                self.level_combo.setCurrentIndex(max(self.level_combo.findData(exam.level), 0))
                self.harshness_combo.setCurrentIndex(
                    max(self.harshness_combo.findData(exam.effective_harshness), 0)
                )
                for question in exam.questions:
                    self._add_card(question)
        finally:
            self._loading = False
        self._set_dirty(False)

    def add_question(self) -> None:
        if self._exam is None:
            return
        question = Question.new()
        self._exam = self._exam.with_question_added(question)
        card = self._add_card(question)
        card.editors["question"].setFocus()
        self._set_dirty(True)

    def delete_question(self, question_id: str) -> None:
        if self._exam is None:
            return
        self._exam = self._exam.with_question_removed(question_id)
        card = self._cards.pop(question_id, None)
        if card is not None:
            self._questions_layout.removeWidget(card)
            card.deleteLater()
        self._renumber()
        self._set_dirty(True)

    def save(self) -> None:
        if self._exam is None:
            return
        logger.info(f"Saving exam {self._exam.title!r}")
        self._set_dirty(False)
        self.examSaved.emit(self._exam)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _on_title_changed(self, text: str) -> None:
        # An emptied title keeps the last non-empty one
        if text.strip():
            self._apply(title=text)

    def _apply(self, **changes) -> None:
        if self._loading or self._exam is None:
            return
        self._exam = self._exam.with_changes(**changes)
        self._set_dirty(True)

    def _on_question_changed(self, question_id: str, field_name: str, text: str) -> None:
        if self._loading or self._exam is None:
            return
        self._exam = self._exam.with_question_updated(question_id, **{field_name: text})
        self._set_dirty(True)

    def _add_card(self, question: Question) -> QuestionCard:
        card = QuestionCard(question, len(self._cards) + 1)
        card.fieldChanged.connect(self._on_question_changed)
        card.deleteRequested.connect(self.delete_question)
        self._questions_layout.addWidget(card)
        self._cards[question.id] = card
        return card

    def _clear_cards(self) -> None:
        for card in self._cards.values():
            self._questions_layout.removeWidget(card)
            card.deleteLater()
        self._cards.clear()

    def _renumber(self) -> None:
        for number, card in enumerate(self._cards.values(), start=1):
            card.set_number(number)

    def _set_dirty(self, dirty: bool) -> None:
        if dirty != self._dirty:
            self._dirty = dirty
            self.dirtyChanged.emit(dirty)
