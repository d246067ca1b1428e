import hashlib
import json
from typing import List, Tuple

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from app.features.scan.exceptions import ModelResponseError
from app.features.scan.schemas.correction import Correction, CorrectionForReview, CorrectionsResponse
from app.features.scan.services.analysis.prompts import VALIDATOR_SYSTEM_PROMPT
from app.platform.cache.redis import ResultCache
from app.platform.logger import get_logger

logger = get_logger(__name__)


class CorrectionValidator:
    """
    Second-opinion LLM pass over already filtered candidates.

    A different model pass catches mistakes the primary model and the
    deterministic filter share, e.g. phrasing that is fine in context.
    """

    CACHE_PREFIX = "validate"
    temperature = 0.4

    def __init__(self, cache: ResultCache, client: AsyncOpenAI, model: str = "gpt-4o"):
        self.cache = cache
        self.client = client
        self.model = model

    @staticmethod
    def cache_key(corrections: List[Correction]) -> str:
        joined = ",".join(c.corrected_text for c in corrections)
        return f"{CorrectionValidator.CACHE_PREFIX}:{hashlib.sha256(joined.encode('utf-8')).hexdigest()}"

    @staticmethod
    def build_prompt(corrections: List[Correction]) -> str:
        # The confidence score is not something to re-judge
        for_review = [
            CorrectionForReview(**c.model_dump(exclude={"probability_of_correctness"})).model_dump(mode="json")
            for c in corrections
        ]
        return json.dumps({"corrections": for_review})

    async def validate(self, corrections: List[Correction]) -> Tuple[List[Correction], int, int]:
        """
        Returns:
            (valid_corrections, input_tokens, output_tokens); tokens are 0 on a cache hit

        Raises:
            ModelResponseError: If the validator answer is missing or malformed
        """
        key = self.cache_key(corrections)

        cached = await self.cache.get_json(key)
        if cached is not None:
            try:
                response = CorrectionsResponse.model_validate(cached)
                logger.info(f"Cache hit for validation of {len(corrections)} corrections")
                return response.corrections, 0, 0
            except ValidationError:
                logger.warning(f"Ignoring cached validation with an outdated shape: {key}")

        try:
            completion = await self.client.chat.completions.parse(
                model=self.model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": VALIDATOR_SYSTEM_PROMPT},
                    {"role": "user", "content": self.build_prompt(corrections)},
                ],
                response_format=CorrectionsResponse,
            )
        except (ValidationError, OpenAIError) as e:
            raise ModelResponseError(f"Failed to parse corrections from OpenAI (Validator): {e}")

        if not completion.choices or completion.choices[0].message.parsed is None:
            raise ModelResponseError("Failed to parse corrections from OpenAI (Validator)")

        result: CorrectionsResponse = completion.choices[0].message.parsed
        await self.cache.set_json(key, result.model_dump(mode="json"))

        usage = completion.usage
        logger.info(f"Validator kept {len(result.corrections)} of {len(corrections)} corrections")
        return (
            result.corrections,
            usage.prompt_tokens if usage else 0,
            usage.completion_tokens if usage else 0,
        )
