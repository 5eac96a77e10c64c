"""
Grading request/response contract: request validation, prompt rendering,
the remote call and defensive decoding of the verdict.
"""
from grading_guru.grading.errors import (
    GradingError,
    GradingPreconditionError,
    GradingResponseError,
    ProviderConfigurationError,
    ProviderNotConfiguredError,
    ProviderNotImplementedError,
)
from grading_guru.grading.providers import (
    GradingProvider,
    OpenAIGradingProvider,
    ProviderKind,
    create_grading_provider,
)
from grading_guru.grading.config import (
    AI_SETTINGS_KEY,
    AISettings,
    ProviderConfig,
    ProviderSettings,
    load_provider_config,
)
from grading_guru.grading.request import GradingRequest
from grading_guru.grading.decoding import decode_grading_response
from grading_guru.grading.service import GradingService

__all__ = [
    "GradingError",
    "GradingPreconditionError",
    "GradingResponseError",
    "ProviderConfigurationError",
    "ProviderNotConfiguredError",
    "ProviderNotImplementedError",
    "GradingProvider",
    "OpenAIGradingProvider",
    "ProviderKind",
    "create_grading_provider",
    "AI_SETTINGS_KEY",
    "AISettings",
    "ProviderConfig",
    "ProviderSettings",
    "load_provider_config",
    "GradingRequest",
    "decode_grading_response",
    "GradingService",
]
