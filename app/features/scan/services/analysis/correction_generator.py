import hashlib
from typing import List, Tuple

from pydantic import ValidationError

from app.features.scan.schemas.correction import Correction, CorrectionsResponse
from app.features.scan.services.analysis.model_providers import ModelRegistry
from app.platform.cache.redis import ResultCache
from app.platform.logger import get_logger

logger = get_logger(__name__)


class CorrectionGenerator:
    """
    Primary LLM pass: extracted text in, candidate corrections out.

    Results are cached by (url, severities, model, text hash) so an unchanged
    page costs nothing to rescan.
    """

    CACHE_PREFIX = "spell_check"

    def __init__(self, cache: ResultCache, models: ModelRegistry):
        self.cache = cache
        self.models = models

    @staticmethod
    def cache_key(url: str, text: str, severities: List[str], model: str) -> str:
        text_hash = hashlib.md5(text.encode("utf-8")).hexdigest()
        # Same severities in any order share an entry
        joined_severities = ",".join(sorted(set(severities)))
        fingerprint = hashlib.sha256(
            f"{url}\n{joined_severities}\n{model}\n{text_hash}".encode("utf-8")
        ).hexdigest()
        return f"{CorrectionGenerator.CACHE_PREFIX}:{fingerprint}"

    async def generate(
        self, url: str, text: str, severities: List[str], model: str
    ) -> Tuple[List[Correction], int, int]:
        """
        Returns:
            (corrections, input_tokens, output_tokens); tokens are 0 on a cache hit

        Raises:
            ModelResponseError: If the model answer is missing or malformed
        """
        key = self.cache_key(url, text, severities, model)

        cached = await self.cache.get_json(key)
        if cached is not None:
            try:
                response = CorrectionsResponse.model_validate(cached)
                logger.info(f"Cache hit for corrections of {url} ({model})")
                return response.corrections, 0, 0
            except ValidationError:
                logger.warning(f"Ignoring cached corrections with an outdated shape: {key}")

        provider = self.models.get(model)
        result = await provider.generate(url, text, severities, model)

        await self.cache.set_json(key, result.corrections.model_dump(mode="json"))

        logger.info(
            f"Model {model} proposed {len(result.corrections.corrections)} corrections for {url}"
        )
        return result.corrections.corrections, result.input_tokens, result.output_tokens
