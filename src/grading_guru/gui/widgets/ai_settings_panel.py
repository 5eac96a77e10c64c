"""
AI provider settings panel.

One section per configurable provider with an on/off switch. Turning one
provider on turns the other off; details are only shown for enabled
providers.
"""
from dataclasses import replace
from typing import Dict

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import (
    QComboBox, QDoubleSpinBox, QFileDialog, QFormLayout, QGroupBox, QHBoxLayout, QLabel,
    QLineEdit, QPushButton, QVBoxLayout, QWidget
)

from grading_guru.grading.config import AISettings
from grading_guru.grading.providers import ProviderKind
from grading_guru.gui.widgets.toggle_switch import ToggleSwitch

STATUS_CLEAR_MS = 3000


class _ProviderSection(QGroupBox):
    def __init__(self, kind: ProviderKind, parent=None):
        super().__init__(parent)
        self.kind = kind

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        title = QLabel(kind.display_name)
        title.setObjectName("sectionTitle")
        header.addWidget(title)
        header.addStretch()
        self.toggle = ToggleSwitch()
        header.addWidget(self.toggle)
        layout.addLayout(header)

        self.details = QWidget()
        self.form = QFormLayout(self.details)
        self.form.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.details)


class AISettingsPanel(QWidget):
    """Edits an AISettings value; emits saveRequested with the result."""

    saveRequested = Signal(object)  # AISettings

    def __init__(self, settings: AISettings, parent=None):
        super().__init__(parent)
        self._settings = settings
        self._sections: Dict[ProviderKind, _ProviderSection] = {}

        layout = QVBoxLayout(self)

        # --- OpenAI ---
        openai = _ProviderSection(ProviderKind.OPENAI)
        self.model_combo = QComboBox()
        openai.form.addRow("Model", self.model_combo)
        self.api_key_edit = QLineEdit()
        self.api_key_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.api_key_edit.setPlaceholderText("sk-...")
        openai.form.addRow("API Key", self.api_key_edit)
        self.timeout_spin = QDoubleSpinBox()
        self.timeout_spin.setRange(5.0, 600.0)
        self.timeout_spin.setSuffix(" s")
        self.timeout_spin.setDecimals(0)
        openai.form.addRow("Timeout", self.timeout_spin)
        layout.addWidget(openai)
        self._sections[ProviderKind.OPENAI] = openai

        # --- Local model ---
        onnx = _ProviderSection(ProviderKind.ONNX)
        path_row = QHBoxLayout()
        self.model_path_edit = QLineEdit()
        self.model_path_edit.setPlaceholderText("Enter path to ONNX model")
        path_row.addWidget(self.model_path_edit)
        browse_btn = QPushButton("Browse...")
        browse_btn.clicked.connect(self._browse_model_path)
        path_row.addWidget(browse_btn)
        onnx.form.addRow("Model Path", path_row)
        note = QLabel("Local models are not supported for grading yet.")
        note.setObjectName("hintLabel")
        onnx.form.addRow(note)
        layout.addWidget(onnx)
        self._sections[ProviderKind.ONNX] = onnx

        for kind, section in self._sections.items():
            section.toggle.clicked.connect(lambda k=kind: self.toggle_provider(k))

        # --- Footer ---
        footer = QHBoxLayout()
        self.status_label = QLabel()
        self.status_label.setObjectName("hintLabel")
        footer.addWidget(self.status_label)
        footer.addStretch()
        self.save_btn = QPushButton("Save Settings")
        self.save_btn.setObjectName("primaryButton")
        self.save_btn.clicked.connect(self.save)
        footer.addWidget(self.save_btn)
        layout.addLayout(footer)
        layout.addStretch()

        self._status_timer = QTimer(self)
        self._status_timer.setSingleShot(True)
        self._status_timer.timeout.connect(self.status_label.clear)

        self._load(settings)

    def settings(self) -> AISettings:
        """Current panel state as an AISettings value."""
        s = self._settings
        openai = replace(
            s.openai,
            api_key=self.api_key_edit.text().strip(),
            selected_model=self.model_combo.currentText() or None,
            timeout_seconds=float(self.timeout_spin.value()),
        )
        onnx = replace(s.onnx, model_path=self.model_path_edit.text().strip())
        return replace(s, openai=openai, onnx=onnx)

    def toggle_provider(self, kind: ProviderKind) -> None:
        self._settings = self.settings().toggle_provider(kind)
        self._refresh_toggles()

    def save(self) -> None:
        self._settings = self.settings()
        self.saveRequested.emit(self._settings)
        self.show_status("Settings saved successfully!")

    def show_status(self, text: str) -> None:
        self.status_label.setText(text)
        self._status_timer.start(STATUS_CLEAR_MS)

    def _load(self, settings: AISettings) -> None:
        self.model_combo.clear()
        self.model_combo.addItems(settings.openai.models)
        if settings.openai.selected_model:
            index = self.model_combo.findText(settings.openai.selected_model)
            if index >= 0:
                self.model_combo.setCurrentIndex(index)
        self.api_key_edit.setText(settings.openai.api_key)
        self.timeout_spin.setValue(settings.openai.timeout_seconds)
        self.model_path_edit.setText(settings.onnx.model_path)
        self._refresh_toggles()

    def _refresh_toggles(self) -> None:
        for kind, section in self._sections.items():
            enabled = self._settings.provider_settings(kind).enabled
            section.toggle.setChecked(enabled)
            section.details.setVisible(enabled)

    def _browse_model_path(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Select ONNX Model", self.model_path_edit.text(), "ONNX Models (*.onnx);;All Files (*)"
        )
        if path:
            self.model_path_edit.setText(path)
