import re
import unicodedata

from app.features.scan.exceptions import ContentError
from app.features.scan.services.extraction.page_loader_service import BrowserSession
from app.features.scan.services.extraction.page_scripts import (
    INSTALL_HELPERS_SCRIPT,
    PAGE_HELPERS_VERSION,
    READ_BODY_TEXT_SCRIPT,
)
from app.platform.logger import get_logger

logger = get_logger(__name__)


class TextExtractorService:
    # Longer pages are cut off rather than failing or paying for huge prompts
    MAX_TEXT_LENGTH = 10_000
    MIN_TEXT_LENGTH = 10

    # Unicode space separators (NBSP, ideographic space, ...) plus line/paragraph separators
    _SPACE_SEPARATORS = re.compile("[\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000]")
    _WHITESPACE_RUNS = re.compile(r"\s+")

    @staticmethod
    def normalize_text(raw_text: str) -> str:
        """NFKC-normalise, turn every space separator into ' ' and collapse whitespace."""
        text = unicodedata.normalize("NFKC", raw_text or "")
        text = TextExtractorService._SPACE_SEPARATORS.sub(" ", text)
        return TextExtractorService._WHITESPACE_RUNS.sub(" ", text).strip()

    @staticmethod
    def truncate_text(text: str) -> str:
        if len(text) > TextExtractorService.MAX_TEXT_LENGTH:
            logger.warning(
                f"Text content is very long ({len(text)} chars), "
                f"truncating to first {TextExtractorService.MAX_TEXT_LENGTH} characters"
            )
            return text[:TextExtractorService.MAX_TEXT_LENGTH]
        return text

    @staticmethod
    async def install_page_helpers(session: BrowserSession) -> str:
        installed = await session.evaluate(INSTALL_HELPERS_SCRIPT)
        if installed != PAGE_HELPERS_VERSION:
            logger.warning(f"Page helpers reported version {installed!r}, expected {PAGE_HELPERS_VERSION}")
        return installed

    @staticmethod
    async def extract_text(session: BrowserSession) -> str:
        """
        Read the page's visible text and install the highlight helpers.

        The helpers stay on the page so the injector can use them later without
        reloading.
        """
        await TextExtractorService.install_page_helpers(session)
        raw_text = await session.evaluate(READ_BODY_TEXT_SCRIPT)
        text = TextExtractorService.normalize_text(raw_text)
        return TextExtractorService.truncate_text(text)

    @staticmethod
    def validate_text(text: str) -> None:
        """
        Raises:
            ContentError: If the page has no usable text
        """
        if not text or len(text) < TextExtractorService.MIN_TEXT_LENGTH:
            raise ContentError(
                f"Not enough text content found on the page ({len(text or '')} characters)"
            )
