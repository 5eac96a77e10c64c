"""
AI provider settings.

The settings blob is stored under a fixed key in the GUI settings file and
keeps the layout the settings panel edits:

    {
      "activeProvider": "openai" | "onnx" | null,
      "openai": {"enabled", "apiKey", "models", "selectedModel", "timeoutSeconds"},
      "onnx":   {"enabled", "apiKey", "modelPath", "models"}
    }

Parsing never raises: malformed values fall back to defaults, the same way
SettingsStore treats the rest of the file.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from grading_guru.grading.errors import ProviderConfigurationError, ProviderNotConfiguredError
from grading_guru.grading.providers import ProviderKind

logger = logging.getLogger(__name__)

AI_SETTINGS_KEY = "aiModelSettings"

DEFAULT_OPENAI_MODELS: List[str] = [
    "gpt-4o-2024-08-06",
    "gpt-4o-mini-2024-07-18",
    "gpt-4-turbo-2024-04-09",
]

DEFAULT_TIMEOUT_SECONDS = 120.0

# Providers the settings panel can activate
CONFIGURABLE_PROVIDERS = (ProviderKind.OPENAI, ProviderKind.ONNX)


@dataclass
class ProviderSettings:
    enabled: bool = False
    api_key: str = ""
    models: List[str] = field(default_factory=list)
    selected_model: Optional[str] = None
    model_path: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def to_dict(self, kind: ProviderKind) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "enabled": self.enabled,
            "apiKey": self.api_key,
            "models": list(self.models),
        }
        if kind is ProviderKind.ONNX:
            d["modelPath"] = self.model_path
        else:
            d["selectedModel"] = self.selected_model
            d["timeoutSeconds"] = self.timeout_seconds
        return d

    @classmethod
    def from_dict(cls, raw: Any, default_models: List[str]) -> "ProviderSettings":
        if not isinstance(raw, dict):
            return cls(models=list(default_models), selected_model=(default_models or [None])[0])
        models_raw = raw.get("models")
        models = [str(m) for m in models_raw if isinstance(m, str)] if isinstance(models_raw, list) else []
        if not models:
            models = list(default_models)
        selected = raw.get("selectedModel")
        if not isinstance(selected, str) or not selected:
            selected = models[0] if models else None
        return cls(
            enabled=bool(raw.get("enabled", False)),
            api_key=str(raw.get("apiKey") or ""),
            models=models,
            selected_model=selected,
            model_path=str(raw.get("modelPath") or ""),
            timeout_seconds=_safe_float(raw.get("timeoutSeconds"), DEFAULT_TIMEOUT_SECONDS),
        )


def _safe_float(value: Any, default: float) -> float:
    """Positive float or default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if result > 0 else default


@dataclass
class AISettings:
    """Editable AI settings. Only one provider may be active at a time."""

    active_provider: Optional[ProviderKind] = None
    openai: ProviderSettings = field(
        default_factory=lambda: ProviderSettings(
            models=list(DEFAULT_OPENAI_MODELS), selected_model=DEFAULT_OPENAI_MODELS[0]
        )
    )
    onnx: ProviderSettings = field(default_factory=ProviderSettings)

    def provider_settings(self, kind: ProviderKind) -> ProviderSettings:
        if kind is ProviderKind.OPENAI:
            return self.openai
        if kind is ProviderKind.ONNX:
            return self.onnx
        raise KeyError(kind.value)

    def toggle_provider(self, kind: ProviderKind) -> "AISettings":
        """
        Activate a provider, or deactivate it if it is already active.

        Activating one provider disables every other one. Returns a new
        AISettings; the receiver is left untouched.
        """
        if kind not in CONFIGURABLE_PROVIDERS:
            raise ValueError(f"Provider cannot be activated from settings: {kind.value}")
        if self.active_provider is kind:
            updated = replace(self, active_provider=None)
            return _with_enabled(updated, None)
        return _with_enabled(replace(self, active_provider=kind), kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activeProvider": self.active_provider.value if self.active_provider else None,
            "openai": self.openai.to_dict(ProviderKind.OPENAI),
            "onnx": self.onnx.to_dict(ProviderKind.ONNX),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "AISettings":
        if not isinstance(raw, dict):
            return cls()
        active = raw.get("activeProvider")
        try:
            active_kind = ProviderKind(active) if active else None
        except ValueError:
            logger.warning(f"Ignoring unknown active provider in settings: {active!r}")
            active_kind = None
        return cls(
            active_provider=active_kind,
            openai=ProviderSettings.from_dict(raw.get("openai"), DEFAULT_OPENAI_MODELS),
            onnx=ProviderSettings.from_dict(raw.get("onnx"), []),
        )


def _with_enabled(settings: AISettings, kind: Optional[ProviderKind]) -> AISettings:
    return replace(
        settings,
        openai=replace(settings.openai, enabled=kind is ProviderKind.OPENAI),
        onnx=replace(settings.onnx, enabled=kind is ProviderKind.ONNX),
    )


@dataclass(frozen=True)
class ProviderConfig:
    """What a provider needs to make one call."""

    provider: ProviderKind
    api_key: str
    model: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    model_path: str = ""


def load_provider_config(settings: Optional[AISettings]) -> ProviderConfig:
    """
    Resolve the active provider into a ProviderConfig.

    Raises:
        ProviderNotConfiguredError: No settings, no active provider, or the
            active provider is disabled
        ProviderConfigurationError: The OpenAI provider has no API key
    """
    if settings is None or settings.active_provider is None:
        raise ProviderNotConfiguredError()
    kind = settings.active_provider
    if kind not in CONFIGURABLE_PROVIDERS:
        # No settings section; the provider itself reports it is unavailable
        return ProviderConfig(provider=kind, api_key="", model="")
    provider_settings = settings.provider_settings(kind)
    if not provider_settings.enabled:
        raise ProviderNotConfiguredError()
    if kind is ProviderKind.OPENAI and not provider_settings.api_key.strip():
        raise ProviderConfigurationError("API key is required")
    return ProviderConfig(
        provider=kind,
        api_key=provider_settings.api_key.strip(),
        model=provider_settings.selected_model or "",
        timeout_seconds=provider_settings.timeout_seconds,
        model_path=provider_settings.model_path,
    )
