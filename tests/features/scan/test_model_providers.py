import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.features.scan.exceptions import ModelResponseError
from app.features.scan.schemas.correction import Correction, CorrectionsResponse
from app.features.scan.services.analysis.model_providers import (
    GeminiProvider,
    ModelRegistry,
    OpenAIProvider,
)

CORRECTION = {
    "issue_type": "spelling",
    "original_text": "teh",
    "corrected_text": "the",
    "surrounding_text": "teh quick fox",
    "explanation_for_correction": "Typo",
    "probability_of_correctness": 0.97,
    "severity": "critical",
}


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_returns_parsed_corrections_and_usage(self):
        parsed = CorrectionsResponse(corrections=[Correction(**CORRECTION)])
        completion = MagicMock()
        completion.choices = [MagicMock(message=MagicMock(parsed=parsed))]
        completion.usage = MagicMock(prompt_tokens=900, completion_tokens=60)
        client = MagicMock()
        client.chat.completions.parse = AsyncMock(return_value=completion)

        result = await OpenAIProvider(client).generate(
            "https://a.com", "teh quick fox", ["critical"], "gpt-4o"
        )

        assert result.corrections == parsed
        assert (result.input_tokens, result.output_tokens) == (900, 60)
        kwargs = client.chat.completions.parse.await_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] is CorrectionsResponse
        assert "teh quick fox" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_empty_choices_raise(self):
        completion = MagicMock()
        completion.choices = []
        client = MagicMock()
        client.chat.completions.parse = AsyncMock(return_value=completion)

        with pytest.raises(ModelResponseError):
            await OpenAIProvider(client).generate("https://a.com", "text", ["minor"], "gpt-4o")


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_parses_json_list(self):
        provider = GeminiProvider(api_key=None)
        model = MagicMock()
        model.generate_content_async = AsyncMock(return_value=MagicMock(text=json.dumps([CORRECTION])))

        with patch.object(GeminiProvider, "_model", return_value=model):
            result = await provider.generate("https://a.com", "teh quick fox", ["critical"], "gemini-2.0-flash")

        assert result.corrections.corrections[0].corrected_text == "the"
        assert (result.input_tokens, result.output_tokens) == (0, 0)

    @pytest.mark.asyncio
    async def test_malformed_answer_raises(self):
        provider = GeminiProvider(api_key=None)
        model = MagicMock()
        model.generate_content_async = AsyncMock(return_value=MagicMock(text='[{"issue_type": "nope"}]'))

        with patch.object(GeminiProvider, "_model", return_value=model):
            with pytest.raises(ModelResponseError):
                await provider.generate("https://a.com", "text", ["minor"], "gemini-2.0-flash")


class TestModelRegistry:
    def test_known_models(self):
        registry = ModelRegistry.create(MagicMock(), gemini_api_key=None)
        assert isinstance(registry.get("gpt-4o"), OpenAIProvider)
        assert isinstance(registry.get("gemini-2.0-flash"), GeminiProvider)

    def test_unknown_model(self):
        registry = ModelRegistry.create(MagicMock(), gemini_api_key=None)
        with pytest.raises(ValueError):
            registry.get("claude-unknown")
