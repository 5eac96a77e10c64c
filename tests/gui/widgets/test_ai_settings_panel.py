"""Unit tests for the AI provider settings panel."""

import pytest
from PySide6.QtWidgets import QLineEdit

from grading_guru.grading.config import AISettings
from grading_guru.grading.providers import ProviderKind
from grading_guru.gui.widgets.ai_settings_panel import AISettingsPanel


@pytest.fixture
def panel(qtbot):
    widget = AISettingsPanel(AISettings())
    qtbot.addWidget(widget)
    widget.show()
    return widget


class TestAISettingsPanel:

    def test_init_when_defaults_then_no_provider_details_visible(self, panel):
        assert not panel._sections[ProviderKind.OPENAI].details.isVisible()
        assert not panel._sections[ProviderKind.ONNX].details.isVisible()
        assert panel.api_key_edit.echoMode() == QLineEdit.EchoMode.Password

    def test_toggle_when_openai_enabled_then_details_shown(self, panel):
        panel.toggle_provider(ProviderKind.OPENAI)
        assert panel._sections[ProviderKind.OPENAI].toggle.isChecked()
        assert panel._sections[ProviderKind.OPENAI].details.isVisible()
        assert panel.settings().active_provider is ProviderKind.OPENAI

    def test_toggle_when_other_provider_enabled_then_first_disabled(self, panel):
        panel.toggle_provider(ProviderKind.OPENAI)
        panel.toggle_provider(ProviderKind.ONNX)
        assert not panel._sections[ProviderKind.OPENAI].toggle.isChecked()
        assert panel._sections[ProviderKind.ONNX].toggle.isChecked()

    def test_toggle_when_switch_clicked_then_provider_toggled(self, panel):
        panel._sections[ProviderKind.OPENAI].toggle.clicked.emit()
        assert panel.settings().active_provider is ProviderKind.OPENAI

    def test_save_when_clicked_then_emits_settings_and_status(self, qtbot, panel):
        panel.toggle_provider(ProviderKind.OPENAI)
        panel.api_key_edit.setText("  sk-test  ")
        panel.model_combo.setCurrentIndex(1)
        with qtbot.waitSignal(panel.saveRequested, timeout=1000) as blocker:
            panel.save_btn.click()
        saved = blocker.args[0]
        assert saved.openai.api_key == "sk-test"
        assert saved.openai.selected_model == panel.model_combo.itemText(1)
        assert panel.status_label.text() == "Settings saved successfully!"

    def test_status_when_timer_elapses_then_cleared(self, qtbot, panel):
        panel._status_timer.setInterval(10)
        panel.status_label.setText("Settings saved successfully!")
        panel._status_timer.start(10)
        qtbot.waitUntil(lambda: panel.status_label.text() == "", timeout=1000)
