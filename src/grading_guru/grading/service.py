"""
Grading entry point used by the GUI.

Ordering matters: the request is validated before settings are read and
before a provider exists, so a missing exam or image never reaches the
network.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from grading_guru.core.models.grading import GradingResult
from grading_guru.grading.config import AISettings, ProviderConfig, load_provider_config
from grading_guru.grading.providers import GradingProvider, create_grading_provider
from grading_guru.grading.request import GradingRequest

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ProviderConfig], GradingProvider]


class GradingService:
    """Resolves the active provider and runs one grading call."""

    def __init__(self, provider_factory: Optional[ProviderFactory] = None):
        self._provider_factory = provider_factory or create_grading_provider

    def grade(self, request: GradingRequest, ai_settings: Optional[AISettings]) -> GradingResult:
        """
        Grade a captured answer.

        Raises:
            GradingPreconditionError: Missing exam, image or questions
            ProviderNotConfiguredError: No active provider
            GradingError: Provider or response failure
        """
        request.validate()
        config = load_provider_config(ai_settings)
        logger.debug(f"Using grading provider {config.provider.value}")
        provider = self._provider_factory(config)
        return provider.grade(request)
