"""
Browser Manager - Launch and manage the Playwright browser.
"""

from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from ..config.settings import Settings
from ..utils.logger import logger


class BrowserManager:
    """Manages Playwright browser lifecycle."""

    def __init__(self, headless: Optional[bool] = None, user_agent: Optional[str] = None):
        """
        Initialize browser manager.

        Args:
            headless: Override headless setting
            user_agent: Optional user agent override
        """
        self.headless = headless if headless is not None else Settings.HEADLESS
        self.user_agent = user_agent or Settings.USER_AGENT

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.launch()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def launch(self) -> Browser:
        """
        Launch browser instance.

        Returns:
            Browser instance
        """
        logger.step(1, "Launching browser")

        self.playwright = await async_playwright().start()
        browser_type = getattr(self.playwright, Settings.BROWSER_TYPE)
        self.browser = await browser_type.launch(
            headless=self.headless,
            args=Settings.BROWSER_ARGS,
        )
        self.context = await self.browser.new_context(
            user_agent=self.user_agent,
            viewport={'width': Settings.VIEWPORT_WIDTH, 'height': Settings.VIEWPORT_HEIGHT},
        )

        logger.success(f"Browser launched ({'headless' if self.headless else 'headed'})")
        return self.browser

    async def new_page(self) -> Page:
        """
        Create a new page.

        Returns:
            Page instance
        """
        if not self.context:
            await self.launch()

        self._page = await self.context.new_page()
        return self._page

    async def close(self):
        """Close browser and cleanup."""
        if self._page and not self._page.is_closed():
            await self._page.close()

        if self.context:
            await self.context.close()

        if self.browser:
            await self.browser.close()

        if self.playwright:
            await self.playwright.stop()

        self._page = self.context = self.browser = self.playwright = None
        logger.success("Browser closed")
