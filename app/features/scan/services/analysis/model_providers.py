"""
Interchangeable LLM backends for correction generation.

Both providers take the same input and return the same CorrectionsResponse.
Token counts are best-effort and only used for cost estimation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import google.generativeai as genai
from openai import AsyncOpenAI, OpenAIError
from pydantic import TypeAdapter, ValidationError

from app.features.scan.exceptions import ModelResponseError
from app.features.scan.schemas.correction import Correction, CorrectionsResponse
from app.features.scan.services.analysis.prompts import (
    GENERATOR_SYSTEM_PROMPT,
    build_generator_prompt,
)
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ModelName(str, Enum):
    gpt_4o = "gpt-4o"
    gemini_2_0_flash = "gemini-2.0-flash"


@dataclass
class ModelResponse:
    corrections: CorrectionsResponse
    input_tokens: int = 0
    output_tokens: int = 0


class OpenAIProvider:
    """Structured output through the OpenAI parse helper."""

    temperature = 0.1

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def generate(
        self, page_url: str, extracted_text: str, severities: List[str], model: str
    ) -> ModelResponse:
        prompt = build_generator_prompt(page_url, extracted_text, severities)
        logger.debug(f"Prompt for OpenAI: {prompt}")

        try:
            completion = await self.client.chat.completions.parse(
                model=model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": GENERATOR_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format=CorrectionsResponse,
            )
        except (ValidationError, OpenAIError) as e:
            raise ModelResponseError(f"Failed to parse corrections from OpenAI: {e}")

        if not completion.choices or completion.choices[0].message.parsed is None:
            raise ModelResponseError("No content returned from OpenAI")

        usage = completion.usage
        return ModelResponse(
            corrections=completion.choices[0].message.parsed,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


# Gemini takes an OpenAPI-style schema; the answer is a bare list of corrections
GEMINI_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "description": "List of corrections",
    "items": {
        "type": "OBJECT",
        "properties": {
            "issue_type": {
                "type": "STRING",
                "enum": ["spelling", "grammar", "style", "consistency"],
                "description": "Type of the issue",
            },
            "original_text": {"type": "STRING", "description": "Original text, verbatim"},
            "corrected_text": {
                "type": "STRING",
                "description": "Corrected text to replace the original text",
            },
            "surrounding_text": {
                "type": "STRING",
                "description": "Surrounding text containing the original text, limit to 100 characters",
            },
            "explanation_for_correction": {
                "type": "STRING",
                "description": "Explanation for the correction",
            },
            "probability_of_correctness": {
                "type": "NUMBER",
                "description": "Probability of correctness, between 0.0 and 1.0",
            },
            "severity": {
                "type": "STRING",
                "enum": ["critical", "important", "minor"],
                "description": "Severity of the issue: critical, important, minor",
            },
        },
        "required": [
            "issue_type",
            "original_text",
            "corrected_text",
            "surrounding_text",
            "explanation_for_correction",
            "probability_of_correctness",
            "severity",
        ],
    },
}

_corrections_list = TypeAdapter(List[Correction])


class GeminiProvider:
    """JSON-mode generation through google-generativeai. Reports zero tokens."""

    temperature = 0.1

    def __init__(self, api_key: Optional[str]):
        if api_key:
            genai.configure(api_key=api_key)

    def _model(self, model: str) -> "genai.GenerativeModel":
        return genai.GenerativeModel(
            model_name=model,
            system_instruction=GENERATOR_SYSTEM_PROMPT,
            generation_config=genai.GenerationConfig(
                response_mime_type="application/json",
                response_schema=GEMINI_RESPONSE_SCHEMA,
                temperature=self.temperature,
            ),
        )

    async def generate(
        self, page_url: str, extracted_text: str, severities: List[str], model: str
    ) -> ModelResponse:
        prompt = build_generator_prompt(page_url, extracted_text, severities)
        response = await self._model(model).generate_content_async(prompt)

        try:
            corrections = _corrections_list.validate_json(response.text)
        except (ValidationError, ValueError) as e:
            raise ModelResponseError(f"Failed to parse corrections from Gemini: {e}")

        return ModelResponse(corrections=CorrectionsResponse(corrections=corrections))


class ModelRegistry:
    """Maps a model name to the backend that serves it."""

    def __init__(self, providers: Dict[str, object]):
        self.providers = providers

    def get(self, model: str):
        provider = self.providers.get(model)
        if provider is None:
            raise ValueError(f"Unsupported model: {model}")
        return provider

    @classmethod
    def create(cls, openai_client: AsyncOpenAI, gemini_api_key: Optional[str]) -> "ModelRegistry":
        return cls({
            ModelName.gpt_4o.value: OpenAIProvider(openai_client),
            ModelName.gemini_2_0_flash.value: GeminiProvider(gemini_api_key),
        })
