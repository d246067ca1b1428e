import base64
from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.chrome.webdriver import WebDriver
from selenium.webdriver.support.ui import WebDriverWait

from app.features.scan.exceptions import NavigationError
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

_RESOURCE_COUNT_SCRIPT = "return performance.getEntriesByType('resource').length;"
_READY_STATE_SCRIPT = "return document.readyState;"


class _NetworkIdle:
    """Wait condition: page loaded and no new resource entries between two polls."""

    def __init__(self):
        self._last_count: Optional[int] = None

    def __call__(self, driver: WebDriver) -> bool:
        if driver.execute_script(_READY_STATE_SCRIPT) != "complete":
            return False
        count = driver.execute_script(_RESOURCE_COUNT_SCRIPT)
        idle = count == self._last_count
        self._last_count = count
        return idle


class BrowserSession:
    """
    One headless browser owned by exactly one scan run.

    Every WebDriver call blocks, so each is moved to the threadpool and the
    run suspends on it in order.
    """

    def __init__(self, driver: WebDriver):
        self.driver = driver
        self._closed = False

    async def evaluate(self, script: str, *args: Any) -> Any:
        return await run_in_threadpool(self.driver.execute_script, script, *args)

    async def capture_clip(self, x: int, y: int, width: int, height: int) -> bytes:
        """PNG of a page-coordinate rectangle, including parts outside the viewport."""
        params: Dict[str, Any] = {
            "format": "png",
            "captureBeyondViewport": True,
            "clip": {"x": x, "y": y, "width": width, "height": height, "scale": 1},
        }
        result = await run_in_threadpool(self.driver.execute_cdp_cmd, "Page.captureScreenshot", params)
        return base64.b64decode(result["data"])

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await run_in_threadpool(self.driver.quit)


class PageLoaderService:
    """Service for opening pages in headless Chrome"""

    @staticmethod
    def _create_driver() -> WebDriver:
        """
        Create and configure a Chrome WebDriver instance.

        Returns:
            WebDriver: Configured Chrome driver
        """
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-setuid-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-accelerated-2d-canvas")
        chrome_options.add_argument("--disable-blink-features=AutomationControlled")
        chrome_options.add_argument(
            f"--window-size={settings.BROWSER_WINDOW_WIDTH},{settings.BROWSER_WINDOW_HEIGHT}"
        )
        chrome_options.add_argument(f"--user-agent={settings.BROWSER_USER_AGENT}")

        if settings.CHROMEDRIVER_PATH:
            driver_service = Service(executable_path=settings.CHROMEDRIVER_PATH)
            driver = webdriver.Chrome(service=driver_service, options=chrome_options)
        else:
            driver = webdriver.Chrome(options=chrome_options)

        driver.set_page_load_timeout(settings.NAVIGATION_TIMEOUT_SECONDS)
        return driver

    @staticmethod
    def _load(url: str) -> WebDriver:
        driver = PageLoaderService._create_driver()
        try:
            # Lets the helper payload run on pages with a strict CSP
            driver.execute_cdp_cmd("Page.setBypassCSP", {"enabled": True})
            driver.get(url)
        except TimeoutException:
            driver.quit()
            raise NavigationError(
                f"Page load timeout after {settings.NAVIGATION_TIMEOUT_SECONDS} seconds for URL: {url}"
            )
        except WebDriverException as e:
            driver.quit()
            raise NavigationError(f"WebDriver error loading URL {url}: {e.msg or e}")

        try:
            WebDriverWait(
                driver,
                settings.NAVIGATION_TIMEOUT_SECONDS,
                poll_frequency=settings.NETWORK_IDLE_MS / 1000,
            ).until(_NetworkIdle())
        except TimeoutException:
            logger.warning(f"Network did not go idle for {url}, continuing with the loaded page")

        return driver

    @staticmethod
    async def open_page(url: str) -> BrowserSession:
        """
        Launch a browser, load the URL and return the session.

        IMPORTANT: Caller MUST close the session when done!

        Raises:
            NavigationError: If the browser cannot start or the page cannot load
        """
        try:
            driver = await run_in_threadpool(PageLoaderService._load, url)
        except NavigationError:
            raise
        except WebDriverException as e:
            raise NavigationError(f"Error starting browser: {e.msg or e}")
        return BrowserSession(driver)
