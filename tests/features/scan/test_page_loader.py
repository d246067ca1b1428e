import base64

import pytest
from unittest.mock import MagicMock, patch

from selenium.common.exceptions import TimeoutException, WebDriverException

from app.features.scan.exceptions import NavigationError
from app.features.scan.services.extraction.page_loader_service import (
    BrowserSession,
    PageLoaderService,
    _NetworkIdle,
)


class TestNetworkIdle:
    def test_idle_once_resource_count_is_stable(self):
        driver = MagicMock()
        driver.execute_script.side_effect = ["complete", 3, "complete", 5, "complete", 5]
        condition = _NetworkIdle()

        assert condition(driver) is False
        assert condition(driver) is False
        assert condition(driver) is True

    def test_not_idle_while_loading(self):
        driver = MagicMock()
        driver.execute_script.return_value = "loading"
        assert _NetworkIdle()(driver) is False


class TestBrowserSession:
    @pytest.mark.asyncio
    async def test_capture_clip_decodes_png(self):
        driver = MagicMock()
        driver.execute_cdp_cmd.return_value = {"data": base64.b64encode(b"png-bytes").decode()}

        image = await BrowserSession(driver).capture_clip(0, 10, 200, 100)

        assert image == b"png-bytes"
        command, params = driver.execute_cdp_cmd.call_args.args
        assert command == "Page.captureScreenshot"
        assert params["captureBeyondViewport"] is True
        assert params["clip"] == {"x": 0, "y": 10, "width": 200, "height": 100, "scale": 1}

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        driver = MagicMock()
        session = BrowserSession(driver)

        await session.close()
        await session.close()

        driver.quit.assert_called_once()


class TestPageLoaderService:
    @pytest.mark.asyncio
    async def test_page_load_timeout_is_navigation_error(self):
        driver = MagicMock()
        driver.get.side_effect = TimeoutException("timed out")

        with patch.object(PageLoaderService, "_create_driver", return_value=driver):
            with pytest.raises(NavigationError):
                await PageLoaderService.open_page("https://slow.example.com")

        driver.quit.assert_called_once()

    @pytest.mark.asyncio
    async def test_browser_start_failure_is_navigation_error(self):
        with patch.object(PageLoaderService, "_create_driver", side_effect=WebDriverException("no chrome")):
            with pytest.raises(NavigationError) as exc_info:
                await PageLoaderService.open_page("https://example.com")

        assert exc_info.value.user_message == "The page could not be loaded"

    @pytest.mark.asyncio
    async def test_returns_session_after_idle(self):
        driver = MagicMock()
        driver.execute_script.side_effect = ["complete", 4, "complete", 4]

        with patch.object(PageLoaderService, "_create_driver", return_value=driver):
            session = await PageLoaderService.open_page("https://example.com")

        assert session.driver is driver
        driver.execute_cdp_cmd.assert_called_once_with("Page.setBypassCSP", {"enabled": True})
        driver.get.assert_called_once_with("https://example.com")
