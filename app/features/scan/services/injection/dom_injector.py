import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from selenium.common.exceptions import JavascriptException

from app.features.scan.schemas.correction import Correction
from app.features.scan.services.extraction.page_loader_service import BrowserSession
from app.features.scan.services.extraction.page_scripts import HIGHLIGHT_SCRIPT
from app.features.scan.services.injection.severity_styles import style_for_severity
from app.features.scan.services.storage.screenshot_store import ScreenshotStore
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InjectedCorrection:
    """A correction that was highlighted on the page and has a screenshot on disk."""
    uuid: str
    correction: Correction
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def padded_clip(coordinates: Dict[str, Any], padding: int) -> Dict[str, int]:
    """Element box grown by `padding` on every side; the origin never goes negative."""
    return {
        "x": max(0, int(coordinates["x"]) - padding),
        "y": max(0, int(coordinates["y"]) - padding),
        "width": int(coordinates["width"]) + padding * 2,
        "height": int(coordinates["height"]) + padding * 2,
    }


class DomInjectorService:
    """
    Highlights each correction in the live page and screenshots it.

    Uses the helpers the text extractor installed. Corrections that cannot be
    located or highlighted are dropped, never fatal.
    """

    def __init__(self, screenshot_store: ScreenshotStore, padding: int = 100):
        self.screenshot_store = screenshot_store
        self.padding = padding

    async def _highlight(self, session: BrowserSession, correction: Correction) -> Optional[Dict[str, Any]]:
        style = style_for_severity(correction.severity)
        try:
            result = await session.evaluate(HIGHLIGHT_SCRIPT, correction.original_text, style.as_js())
        except JavascriptException as e:
            logger.warning(f"Highlight script failed for {correction.original_text!r}: {e.msg}")
            return None

        if not result or not result.get("success") or not result.get("coordinates"):
            return None
        return result["coordinates"]

    async def inject(
        self, session: BrowserSession, corrections: List[Correction], correlation_id: str = ""
    ) -> List[InjectedCorrection]:
        injected: List[InjectedCorrection] = []

        try:
            for correction in corrections:
                coordinates = await self._highlight(session, correction)
                if coordinates is None:
                    logger.warning(
                        f"[{correlation_id}] Failed to inject correction on UI, discarding it: "
                        f"{correction.original_text!r} -> {correction.corrected_text!r}"
                    )
                    continue

                correction_uuid = str(uuid.uuid4())
                clip = padded_clip(coordinates, self.padding)
                image = await session.capture_clip(**clip)
                await self.screenshot_store.save(correction_uuid, image)

                injected.append(InjectedCorrection(uuid=correction_uuid, correction=correction))
        except Exception:
            # A browser failure mid-batch must not leave orphaned files behind
            self.screenshot_store.delete_many(item.uuid for item in injected)
            raise

        logger.info(f"[{correlation_id}] Injected {len(injected)} of {len(corrections)} corrections")
        return injected
