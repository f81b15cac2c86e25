"""
Page Loader - Load the form URL and wait for stabilization.
"""

from typing import Optional

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from ..config.settings import Settings
from ..utils.wait_utils import WaitUtils
from ..utils.logger import logger


class PageLoader:
    """Handles page loading and stabilization."""

    @staticmethod
    async def load(
        page: Page,
        url: str,
        wait_for_stability: bool = True,
        timeout: Optional[int] = None
    ) -> Page:
        """
        Load URL and wait for page stabilization.

        Args:
            page: Playwright page object
            url: URL to load (as-is, no modification)
            wait_for_stability: Whether to wait for page stability
            timeout: Optional timeout override in ms

        Returns:
            Loaded and stabilized page

        Raises:
            ValueError: URL is not http(s)
            TimeoutError: Navigation did not complete in time
        """
        logger.step(2, f"Loading form page: {url}")

        if not url.startswith(('http://', 'https://')):
            raise ValueError(f"Invalid URL: {url}. Must start with http:// or https://")

        timeout = timeout or Settings.PAGE_LOAD_TIMEOUT

        try:
            logger.debug(f"Navigating to {url}")
            await page.goto(url, wait_until='domcontentloaded', timeout=timeout)
        except PlaywrightTimeoutError as e:
            logger.error(f"Page load timeout: {url}")
            raise TimeoutError(f"Failed to load {url} within {timeout}ms") from e

        if wait_for_stability:
            stabilized = await WaitUtils.wait_for_stability(page, timeout)
            if not stabilized:
                logger.warning("Page may not be fully stabilized")
        else:
            logger.info("Page loaded (stability wait skipped)")

        logger.success("Page loaded")
        return page
