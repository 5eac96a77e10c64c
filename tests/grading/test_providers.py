"""
Unit tests for grading providers and the grading service.
"""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from grading_guru.grading.config import AISettings, ProviderConfig
from grading_guru.grading.errors import (
    GradingPreconditionError,
    GradingResponseError,
    ProviderConfigurationError,
    ProviderNotConfiguredError,
    ProviderNotImplementedError,
)
from grading_guru.grading.providers import (
    GRADING_TEMPERATURE,
    OpenAIGradingProvider,
    ProviderKind,
    create_grading_provider,
)
from grading_guru.grading.request import GradingRequest
from grading_guru.grading.service import GradingService

REPLY = {
    "matched_question": {"question": "Explain Newton's second law.", "confidence": 0.9},
    "grading": {"final_score": 3, "total_points_possible": 3, "confidence": 0.85, "schema_criteria": []},
    "feedback": {"detailed_comments": "Full marks.", "criteria_met": [], "criteria_unmet": [], "improvements": []},
}


def _completion(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def openai_config():
    return ProviderConfig(provider=ProviderKind.OPENAI, api_key="sk-test", model="gpt-4o-2024-08-06")


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.chat.completions.create.return_value = _completion(json.dumps(REPLY))
    return client


@pytest.fixture
def request_(sample_exam, sample_data_url):
    return GradingRequest.for_exam(sample_exam, sample_data_url)


class TestOpenAIGradingProvider:

    def test_init_when_no_api_key_then_configuration_error(self, openai_config):
        config = ProviderConfig(provider=ProviderKind.OPENAI, api_key="", model="m")
        with pytest.raises(ProviderConfigurationError, match="API key is required"):
            OpenAIGradingProvider(config, client=MagicMock())

    def test_init_when_no_model_then_configuration_error(self):
        config = ProviderConfig(provider=ProviderKind.OPENAI, api_key="sk", model="")
        with pytest.raises(ProviderConfigurationError, match="No OpenAI model selected"):
            OpenAIGradingProvider(config, client=MagicMock())

    def test_grade_when_reply_valid_then_result_decoded(self, openai_config, mock_client, request_):
        result = OpenAIGradingProvider(openai_config, client=mock_client).grade(request_)
        assert result.score_label == "3/3"
        assert result.feedback.detailed_comments == "Full marks."

    def test_grade_when_called_then_one_multimodal_request(self, openai_config, mock_client, request_):
        OpenAIGradingProvider(openai_config, client=mock_client).grade(request_)
        mock_client.chat.completions.create.assert_called_once()
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-2024-08-06"
        assert kwargs["temperature"] == GRADING_TEMPERATURE == 0.3
        system, user = kwargs["messages"]
        assert system["role"] == "system"
        text_part, image_part = user["content"]
        assert text_part["type"] == "text"
        assert "Mechanics Midterm" in text_part["text"]
        assert image_part == {"type": "image_url", "image_url": {"url": request_.image_data}}

    def test_grade_when_reply_empty_then_response_error(self, openai_config, mock_client, request_):
        mock_client.chat.completions.create.return_value = _completion("")
        with pytest.raises(GradingResponseError) as exc_info:
            OpenAIGradingProvider(openai_config, client=mock_client).grade(request_)
        assert exc_info.value.detail == "No response received from AI service"

    def test_grade_when_no_choices_then_response_error(self, openai_config, mock_client, request_):
        mock_client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with pytest.raises(GradingResponseError):
            OpenAIGradingProvider(openai_config, client=mock_client).grade(request_)

    def test_grade_when_sdk_fails_then_wrapped(self, openai_config, mock_client, request_):
        mock_client.chat.completions.create.side_effect = OpenAIError("rate limited")
        with pytest.raises(GradingResponseError) as exc_info:
            OpenAIGradingProvider(openai_config, client=mock_client).grade(request_)
        assert str(exc_info.value) == "Failed to process grading response"
        assert exc_info.value.detail == "rate limited"
        assert isinstance(exc_info.value.__cause__, OpenAIError)

    def test_grade_when_reply_not_json_then_response_error(self, openai_config, mock_client, request_):
        mock_client.chat.completions.create.return_value = _completion("I cannot grade this.")
        with pytest.raises(GradingResponseError):
            OpenAIGradingProvider(openai_config, client=mock_client).grade(request_)

    def test_grade_when_image_missing_then_no_remote_call(self, openai_config, mock_client, sample_exam):
        with pytest.raises(GradingPreconditionError):
            OpenAIGradingProvider(openai_config, client=mock_client).grade(
                GradingRequest.for_exam(sample_exam, None)
            )
        mock_client.chat.completions.create.assert_not_called()


class TestUnimplementedProviders:

    @pytest.mark.parametrize(
        "kind, message",
        [
            (ProviderKind.ANTHROPIC, "Anthropic service not implemented yet"),
            (ProviderKind.GEMINI, "Gemini service not implemented yet"),
            (ProviderKind.ONNX, "Local model service not implemented yet"),
        ],
    )
    def test_grade_when_unimplemented_then_named_error(self, kind, message, request_):
        provider = create_grading_provider(ProviderConfig(provider=kind, api_key="", model=""))
        with pytest.raises(ProviderNotImplementedError, match=message) as exc_info:
            provider.grade(request_)
        assert exc_info.value.provider == kind.value


class TestGradingService:

    @pytest.fixture
    def ai_settings(self):
        settings = AISettings().toggle_provider(ProviderKind.OPENAI)
        settings.openai.api_key = "sk-test"
        return settings

    def test_grade_when_configured_then_provider_used(self, ai_settings, mock_client, request_):
        service = GradingService(provider_factory=lambda config: OpenAIGradingProvider(config, client=mock_client))
        result = service.grade(request_, ai_settings)
        assert result.grading.final_score == 3.0

    def test_grade_when_precondition_fails_then_factory_never_called(self, ai_settings, sample_exam):
        factory = MagicMock()
        with pytest.raises(GradingPreconditionError):
            GradingService(provider_factory=factory).grade(GradingRequest.for_exam(sample_exam, None), ai_settings)
        factory.assert_not_called()

    def test_grade_when_no_provider_active_then_not_configured(self, request_):
        factory = MagicMock()
        with pytest.raises(ProviderNotConfiguredError):
            GradingService(provider_factory=factory).grade(request_, AISettings())
        factory.assert_not_called()

    def test_grade_when_local_model_active_then_not_implemented(self, request_):
        settings = AISettings().toggle_provider(ProviderKind.ONNX)
        with pytest.raises(ProviderNotImplementedError, match="Local model"):
            GradingService().grade(request_, settings)
