"""
Unit tests for AI provider settings.
"""
import pytest

from grading_guru.grading.config import (
    AISettings,
    DEFAULT_OPENAI_MODELS,
    DEFAULT_TIMEOUT_SECONDS,
    ProviderSettings,
    load_provider_config,
)
from grading_guru.grading.errors import ProviderConfigurationError, ProviderNotConfiguredError
from grading_guru.grading.providers import ProviderKind


def _openai_settings(api_key="sk-test"):
    settings = AISettings().toggle_provider(ProviderKind.OPENAI)
    settings.openai.api_key = api_key
    return settings


class TestToggleProvider:

    def test_toggle_when_inactive_then_activates_exclusively(self):
        settings = AISettings().toggle_provider(ProviderKind.ONNX).toggle_provider(ProviderKind.OPENAI)
        assert settings.active_provider is ProviderKind.OPENAI
        assert settings.openai.enabled is True
        assert settings.onnx.enabled is False

    def test_toggle_when_active_then_deactivates(self):
        settings = AISettings().toggle_provider(ProviderKind.OPENAI).toggle_provider(ProviderKind.OPENAI)
        assert settings.active_provider is None
        assert settings.openai.enabled is False

    def test_toggle_when_called_then_original_untouched(self):
        original = AISettings()
        original.toggle_provider(ProviderKind.OPENAI)
        assert original.active_provider is None

    def test_toggle_when_not_configurable_then_raises_error(self):
        with pytest.raises(ValueError):
            AISettings().toggle_provider(ProviderKind.GEMINI)


class TestSerialization:

    def test_from_dict_when_not_dict_then_defaults(self):
        settings = AISettings.from_dict("garbage")
        assert settings.active_provider is None
        assert settings.openai.models == DEFAULT_OPENAI_MODELS
        assert settings.openai.selected_model == DEFAULT_OPENAI_MODELS[0]

    def test_from_dict_when_unknown_provider_then_ignored(self):
        settings = AISettings.from_dict({"activeProvider": "mystery"})
        assert settings.active_provider is None

    def test_to_dict_then_from_dict_when_edited_then_preserved(self):
        settings = _openai_settings()
        settings.openai.timeout_seconds = 45.0
        restored = AISettings.from_dict(settings.to_dict())
        assert restored.active_provider is ProviderKind.OPENAI
        assert restored.openai.api_key == "sk-test"
        assert restored.openai.timeout_seconds == 45.0

    @pytest.mark.parametrize("raw", [None, "abc", -5, 0, True])
    def test_provider_from_dict_when_bad_timeout_then_default(self, raw):
        settings = ProviderSettings.from_dict({"timeoutSeconds": raw}, DEFAULT_OPENAI_MODELS)
        assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


class TestLoadProviderConfig:

    def test_load_when_no_settings_then_not_configured(self):
        with pytest.raises(ProviderNotConfiguredError, match="No AI provider configured"):
            load_provider_config(None)

    def test_load_when_no_active_provider_then_not_configured(self):
        with pytest.raises(ProviderNotConfiguredError):
            load_provider_config(AISettings())

    def test_load_when_active_but_disabled_then_not_configured(self):
        settings = AISettings(active_provider=ProviderKind.OPENAI)
        with pytest.raises(ProviderNotConfiguredError):
            load_provider_config(settings)

    def test_load_when_api_key_blank_then_configuration_error(self):
        with pytest.raises(ProviderConfigurationError, match="API key is required"):
            load_provider_config(_openai_settings(api_key="   "))

    def test_load_when_openai_ready_then_config_built(self):
        config = load_provider_config(_openai_settings(api_key=" sk-test "))
        assert config.provider is ProviderKind.OPENAI
        assert config.api_key == "sk-test"
        assert config.model == DEFAULT_OPENAI_MODELS[0]
        assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS

    def test_load_when_active_provider_has_no_section_then_bare_config(self):
        config = load_provider_config(AISettings(active_provider=ProviderKind.GEMINI))
        assert config.provider is ProviderKind.GEMINI
        assert config.api_key == ""
