import pytest
from unittest.mock import AsyncMock, MagicMock

from selenium.common.exceptions import JavascriptException, WebDriverException

from app.features.scan.schemas.correction import Correction
from app.features.scan.services.extraction.page_scripts import HIGHLIGHT_SCRIPT
from app.features.scan.services.injection.dom_injector import DomInjectorService, padded_clip
from app.features.scan.services.injection.severity_styles import SEVERITY_STYLES, style_for_severity
from app.features.scan.services.storage.screenshot_store import ScreenshotStore, is_valid_screenshot_id


def _correction(original_text: str, severity: str = "critical") -> Correction:
    return Correction(
        issue_type="spelling",
        original_text=original_text,
        corrected_text=original_text + "!",
        surrounding_text=original_text,
        explanation_for_correction="Test",
        probability_of_correctness=0.9,
        severity=severity,
    )


def _found(x=10, y=20, width=50, height=12):
    return {"success": True, "coordinates": {"x": x, "y": y, "width": width, "height": height}}


@pytest.fixture
def store(tmp_path):
    return ScreenshotStore(str(tmp_path))


@pytest.fixture
def session():
    session = MagicMock()
    session.evaluate = AsyncMock()
    session.capture_clip = AsyncMock(return_value=b"\x89PNG fake")
    return session


class TestPaddedClip:
    def test_grows_box_on_every_side(self):
        clip = padded_clip({"x": 300, "y": 400, "width": 50, "height": 10}, 100)
        assert clip == {"x": 200, "y": 300, "width": 250, "height": 210}

    def test_origin_is_clamped_at_zero(self):
        clip = padded_clip({"x": 30, "y": 5, "width": 50, "height": 10}, 100)
        assert clip["x"] == 0
        assert clip["y"] == 0
        assert clip["width"] == 250


class TestSeverityStyles:
    def test_known_severity(self):
        assert style_for_severity("critical") == SEVERITY_STYLES["critical"]

    def test_unknown_severity_falls_back_to_minor(self):
        assert style_for_severity("cosmetic") == SEVERITY_STYLES["minor"]


class TestDomInjectorService:
    @pytest.mark.asyncio
    async def test_injects_and_saves_screenshot(self, session, store):
        session.evaluate.return_value = _found()
        injector = DomInjectorService(store, padding=100)

        injected = await injector.inject(session, [_correction("teh")], "run-1")

        assert len(injected) == 1
        assert is_valid_screenshot_id(injected[0].uuid)
        assert store.find(injected[0].uuid).read_bytes() == b"\x89PNG fake"
        session.capture_clip.assert_awaited_once_with(x=0, y=0, width=250, height=212)

        script, text, style = session.evaluate.await_args.args
        assert script == HIGHLIGHT_SCRIPT
        assert text == "teh"
        assert style == SEVERITY_STYLES["critical"].as_js()

    @pytest.mark.asyncio
    async def test_unlocatable_correction_is_dropped(self, session, store):
        session.evaluate.side_effect = [
            _found(),
            {"success": False, "coordinates": None},
            _found(),
        ]
        injector = DomInjectorService(store)
        corrections = [_correction("one"), _correction("two", "minor"), _correction("three", "important")]

        injected = await injector.inject(session, corrections)

        assert [item.correction.original_text for item in injected] == ["one", "three"]
        assert session.capture_clip.await_count == 2
        assert len({item.uuid for item in injected}) == 2

    @pytest.mark.asyncio
    async def test_script_error_drops_correction(self, session, store):
        session.evaluate.side_effect = JavascriptException("helpers missing")
        injector = DomInjectorService(store)

        injected = await injector.inject(session, [_correction("teh")])

        assert injected == []
        session.capture_clip.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_browser_failure_mid_batch_removes_saved_screenshots(self, session, store):
        session.evaluate.return_value = _found()
        session.capture_clip.side_effect = [b"first", WebDriverException("tab crashed")]
        injector = DomInjectorService(store)

        with pytest.raises(WebDriverException):
            await injector.inject(session, [_correction("one"), _correction("two")])

        assert list(store.directory.glob("*.png")) == []
