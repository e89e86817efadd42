"""Playwright browser session and the page operations the crawler relies on."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class PageDriver:
    """Thin wrapper exposing the capabilities the crawler needs from a page."""

    def __init__(self, page: Page):
        self.page = page

    async def navigate(self, url: str):
        """Load ``url`` and return once the DOM is ready (not full network idle)."""
        await self.page.goto(url, wait_until="domcontentloaded")

    async def wait_for_quiescence(self, timeout_ms: int) -> bool:
        """Wait for network idle.

        Returns:
            True if the page went idle, False if the timeout expired first
        """
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True

    async def pause(self, ms: int):
        await self.page.wait_for_timeout(ms)

    async def snapshot_html(self) -> str:
        return await self.page.content()

    async def query_all(self, selector: str) -> list[Any]:
        return await self.page.query_selector_all(selector)

    async def element_text(self, handle) -> str:
        return (await handle.text_content()) or ""

    async def element_tag(self, handle) -> str:
        return await handle.evaluate("el => el.tagName")

    async def element_box(self, handle) -> dict[str, float] | None:
        return await handle.bounding_box()

    async def scroll_into_view(self, handle):
        await handle.scroll_into_view_if_needed()

    async def click(self, handle):
        await handle.click()

    def current_url(self) -> str:
        return self.page.url

    async def go_back(self):
        await self.page.go_back(wait_until="domcontentloaded")

    async def enumerate_links(self) -> list[str]:
        """Raw ``href`` attribute of every anchor on the page."""
        return await self.page.eval_on_selector_all(
            "a[href]", "links => links.map(link => link.getAttribute('href'))"
        )


class BrowserSession:
    """Scoped Chromium browser.

    Use as ``async with BrowserSession() as session:``; every page opened with
    ``open_page()`` gets its own browsing context, closed on exit.
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        viewport_width: int = 1280,
        viewport_height: int = 800,
        navigation_timeout_ms: int = 30000,
    ):
        self.headless = headless
        self.user_agent = user_agent
        self.viewport = {"width": viewport_width, "height": viewport_height}
        self.navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @classmethod
    def from_config(cls, config) -> "BrowserSession":
        return cls(
            headless=config.headless,
            user_agent=config.user_agent,
            viewport_width=config.viewport_width,
            viewport_height=config.viewport_height,
            navigation_timeout_ms=config.navigation_timeout_ms,
        )

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.info(f"[BROWSER] Chromium launched (headless={self.headless})")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.info("[BROWSER] Browser closed")

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[PageDriver]:
        """Isolated browsing context with fresh cookies and storage."""
        if self._browser is None:
            raise RuntimeError("BrowserSession is not started, use 'async with BrowserSession()'")

        context = await self._browser.new_context(user_agent=self.user_agent, viewport=self.viewport)
        try:
            page = await context.new_page()
            page.set_default_timeout(self.navigation_timeout_ms)
            yield PageDriver(page)
        finally:
            await context.close()
