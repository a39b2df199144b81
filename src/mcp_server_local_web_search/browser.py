"""Browser session owning one Chromium process for the duration of a search.

Every navigation gets its own page so a slow page cannot block others issued
concurrently, and no DOM state leaks from one link into another.
"""

import asyncio
import logging
from typing import Any

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import BrowserSettings, WaitUntil
from .exceptions import EvaluationError, LaunchError, NavigationError, PageTimeoutError

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


def _launch_options(config: BrowserSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"headless": config.headless, "args": LAUNCH_ARGS}
    if config.proxy_server:
        proxy = {"server": config.proxy_server}
        if config.proxy_bypass:
            proxy["bypass"] = config.proxy_bypass
        options["proxy"] = proxy
    if config.channel:
        options["channel"] = config.channel
    if config.executable_path:
        options["executable_path"] = config.executable_path
    return options


def _context_options(config: BrowserSettings) -> dict[str, Any]:
    options: dict[str, Any] = {
        "user_agent": config.user_agent,
        "viewport": {"width": config.viewport_width, "height": config.viewport_height},
        "locale": config.locale,
        "extra_http_headers": dict(config.extra_headers),
    }
    if config.timezone_id:
        options["timezone_id"] = config.timezone_id
    if config.latitude is not None and config.longitude is not None:
        options["geolocation"] = {"latitude": config.latitude, "longitude": config.longitude}
        options["permissions"] = ["geolocation"]
    return options


class BrowserSession:
    """Exclusive handle to one browser process.

    Create with :meth:`launch` and release with :meth:`close` (or use the
    session as an async context manager). Safe to share across concurrent
    tasks of a single search: each call to :meth:`evaluate_on_page` works on
    its own page.
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        config: BrowserSettings,
    ):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._config = config
        self._closed = False

    @classmethod
    async def launch(cls, config: BrowserSettings) -> "BrowserSession":
        """Start Chromium and open a browser context configured from ``config``.

        Raises:
            LaunchError: If the driver or browser process cannot be started.
        """
        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise LaunchError(f"Failed to start Playwright: {e}") from e

        browser: Browser | None = None
        try:
            browser = await playwright.chromium.launch(**_launch_options(config))
            context = await browser.new_context(**_context_options(config))
        except BaseException as e:
            # Cancellation (outer deadline) must release the process too
            if browser is not None:
                await _quietly("browser.close", browser.close())
            await _quietly("playwright.stop", playwright.stop())
            if not isinstance(e, Exception):
                raise
            raise LaunchError(f"Failed to launch browser: {e}") from e

        logger.debug(f"Browser launched (headless={config.headless}, proxy={config.proxy_server or 'none'})")
        return cls(playwright, browser, context, config)

    @property
    def closed(self) -> bool:
        return self._closed

    async def evaluate_on_page(
        self,
        url: str,
        script: str,
        arg: Any = None,
        wait_until: WaitUntil | None = None,
    ) -> Any:
        """Navigate a fresh page to ``url`` and run ``script`` inside it.

        Args:
            url: Page to open.
            script: Self-contained JavaScript function source, called with ``arg``.
            arg: JSON-serializable argument passed into the page.
            wait_until: Load state to wait for (defaults to ``domcontentloaded``).

        Returns:
            The script's return value, deserialized.

        Raises:
            NavigationError: No response, an HTTP error status, or a failed navigation.
            PageTimeoutError: Navigation or evaluation exceeded its budget.
            EvaluationError: The script threw inside the page.
        """
        if self._closed:
            raise NavigationError(f"Browser session is closed, cannot open {url}")

        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            raise NavigationError(f"Could not open a page for {url}: {e.message}") from e

        try:
            try:
                response = await page.goto(
                    url,
                    wait_until=wait_until or "domcontentloaded",
                    timeout=self._config.navigation_timeout,
                )
            except PlaywrightTimeoutError as e:
                raise PageTimeoutError(f"Timed out loading {url}") from e
            except PlaywrightError as e:
                raise NavigationError(f"Failed to load {url}: {e.message}") from e

            if response is None:
                raise NavigationError(f"No response from {url}")
            if response.status >= 400:
                raise NavigationError(f"HTTP {response.status} from {url}")

            try:
                return await asyncio.wait_for(page.evaluate(script, arg), timeout=self._config.evaluation_timeout)
            except asyncio.TimeoutError as e:
                raise PageTimeoutError(f"Script timed out on {url}") from e
            except PlaywrightError as e:
                raise EvaluationError(f"Script failed on {url}: {e.message}") from e
        finally:
            await _quietly("page.close", page.close())

    async def close(self) -> None:
        """Release the browser process and all remaining pages. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await _quietly("context.close", self._context.close())
        await _quietly("browser.close", self._browser.close())
        await _quietly("playwright.stop", self._playwright.stop())
        logger.debug("Browser closed")

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


async def _quietly(what: str, awaitable: Any) -> None:
    """Await a cleanup call, logging instead of raising on failure."""
    try:
        await awaitable
    except Exception as e:
        logger.warning(f"Ignoring error during {what}: {e}")
