"""
Grading error taxonomy.

All errors raised by the grading package derive from GradingError, so the
GUI can show `str(exc)` for any of them without leaking parser or SDK
internals.
"""
from __future__ import annotations

from typing import Optional


class GradingError(Exception):
    """Base class for grading failures."""


class GradingPreconditionError(GradingError):
    """A required input is missing. Raised before any remote call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ProviderNotConfiguredError(GradingError):
    """No AI provider is active in settings."""

    def __init__(self, message: str = "No AI provider configured. Please configure an AI provider in settings."):
        super().__init__(message)


class ProviderConfigurationError(GradingError):
    """The active provider is missing something it needs, e.g. an API key."""


class ProviderNotImplementedError(GradingError):
    """The selected provider variant has no implementation."""

    def __init__(self, provider: str, display_name: str):
        super().__init__(f"{display_name} service not implemented yet")
        self.provider = provider


class GradingResponseError(GradingError):
    """The remote call failed or its response could not be decoded."""

    MESSAGE = "Failed to process grading response"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(self.MESSAGE)
        self.detail = detail
