"""
Grading providers.

Every provider implements one capability: grade a captured answer image
against an exam's questions. The set of variants is closed (ProviderKind);
only OpenAI is implemented, the others fail with ProviderNotImplementedError.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from openai import OpenAI, OpenAIError

from grading_guru.core.models.grading import GradingResult
from grading_guru.grading.decoding import decode_grading_response
from grading_guru.grading.errors import (
    GradingResponseError,
    ProviderConfigurationError,
    ProviderNotImplementedError,
)
from grading_guru.grading.prompts import SYSTEM_INSTRUCTION, render_grading_prompt

if TYPE_CHECKING:
    from grading_guru.grading.config import ProviderConfig
    from grading_guru.grading.request import GradingRequest

logger = logging.getLogger(__name__)

GRADING_TEMPERATURE = 0.3


class ProviderKind(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    ONNX = "onnx"  # local model

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ProviderKind.OPENAI: "OpenAI",
    ProviderKind.ANTHROPIC: "Anthropic",
    ProviderKind.GEMINI: "Gemini",
    ProviderKind.ONNX: "Local model",
}


class GradingProvider(ABC):
    """Base class for grading providers."""

    kind: ProviderKind

    def __init__(self, config: "ProviderConfig"):
        self.config = config

    @abstractmethod
    def grade(self, request: "GradingRequest") -> GradingResult:
        """
        Grade one captured answer.

        Raises:
            GradingPreconditionError: Request is missing exam, image or questions
            GradingError: Any provider or response failure
        """


class OpenAIGradingProvider(GradingProvider):
    """Multimodal chat-completion grading through the OpenAI API."""

    kind = ProviderKind.OPENAI

    def __init__(self, config: "ProviderConfig", client: Optional[Any] = None):
        super().__init__(config)
        if not config.api_key:
            raise ProviderConfigurationError("API key is required")
        if not config.model:
            raise ProviderConfigurationError("No OpenAI model selected")
        self.client = client or OpenAI(api_key=config.api_key, timeout=config.timeout_seconds)

    def build_messages(self, request: "GradingRequest") -> list[Dict[str, Any]]:
        return [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": render_grading_prompt(request.exam, request.questions)},
                    {"type": "image_url", "image_url": {"url": request.image_data}},
                ],
            },
        ]

    def grade(self, request: "GradingRequest") -> GradingResult:
        request.validate()
        logger.info(
            f"Grading with {self.config.model}: exam {request.exam.title!r}, "
            f"{len(request.questions)} candidate questions"
        )
        try:
            completion = self.client.chat.completions.create(
                model=self.config.model,
                messages=self.build_messages(request),
                temperature=GRADING_TEMPERATURE,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI grading request failed: {e}")
            raise GradingResponseError(str(e)) from e

        content = None
        if completion.choices:
            content = completion.choices[0].message.content
        if not content:
            logger.error("No response content received from OpenAI")
            raise GradingResponseError("No response received from AI service")

        result = decode_grading_response(content)
        logger.info(f"Graded: {result.score_label} (confidence {result.grading.confidence:.2f})")
        return result


class _UnimplementedProvider(GradingProvider):
    def grade(self, request: "GradingRequest") -> GradingResult:
        raise ProviderNotImplementedError(self.kind.value, self.kind.display_name)


class AnthropicGradingProvider(_UnimplementedProvider):
    kind = ProviderKind.ANTHROPIC


class GeminiGradingProvider(_UnimplementedProvider):
    kind = ProviderKind.GEMINI


class LocalModelGradingProvider(_UnimplementedProvider):
    kind = ProviderKind.ONNX


PROVIDERS: Dict[ProviderKind, Type[GradingProvider]] = {
    ProviderKind.OPENAI: OpenAIGradingProvider,
    ProviderKind.ANTHROPIC: AnthropicGradingProvider,
    ProviderKind.GEMINI: GeminiGradingProvider,
    ProviderKind.ONNX: LocalModelGradingProvider,
}


def create_grading_provider(config: "ProviderConfig", **kwargs: Any) -> GradingProvider:
    """Instantiate the provider class for `config.provider`."""
    return PROVIDERS[ProviderKind(config.provider)](config, **kwargs)
