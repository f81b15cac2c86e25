"""
Waiting strategies for page stabilization and outcome races.
"""

import asyncio
from typing import Optional, Dict, Awaitable

from playwright.async_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from ..config.settings import Settings
from .logger import logger


class WaitUtils:
    """Wait utilities for page stabilization."""

    @staticmethod
    async def wait_for_stability(page: Page, timeout: Optional[int] = None) -> bool:
        """
        Wait for the page to stabilize.

        Waits for network idle, a short buffer for client-side frameworks,
        then for DOM mutations to settle.

        Args:
            page: Playwright page object
            timeout: Optional timeout in ms

        Returns:
            True if page stabilized, False if timeout
        """
        timeout = timeout or Settings.PAGE_LOAD_TIMEOUT

        try:
            logger.debug("Waiting for network idle...")
            await page.wait_for_load_state('networkidle', timeout=min(timeout, Settings.NETWORK_IDLE_TIMEOUT))
        except PlaywrightTimeoutError:
            # Long-polling pages never go idle; the DOM may still be usable
            logger.debug(f"Network idle timeout after {Settings.NETWORK_IDLE_TIMEOUT}ms")

        logger.debug(f"Waiting {Settings.JS_EXECUTION_BUFFER}ms for JS execution...")
        await asyncio.sleep(Settings.JS_EXECUTION_BUFFER / 1000)

        settled = await WaitUtils.wait_for_dom_mutations(page)
        if settled:
            logger.success("Page stabilized")
        return settled

    @staticmethod
    async def wait_for_dom_mutations(page: Page, quiet_ms: int = 500, max_wait: int = 3000) -> bool:
        """
        Wait until the DOM has been quiet for ``quiet_ms``.

        Args:
            page: Playwright page object
            quiet_ms: Mutation-free interval that counts as settled
            max_wait: Hard cap in ms

        Returns:
            True if DOM settled, False if the cap was hit or the page went away
        """
        try:
            return await page.evaluate("""
                ([quietMs, maxWait]) => new Promise((resolve) => {
                    let timer;
                    const observer = new MutationObserver(() => {
                        clearTimeout(timer);
                        timer = setTimeout(done, quietMs, true);
                    });
                    const done = (settled) => {
                        observer.disconnect();
                        clearTimeout(timer);
                        clearTimeout(cap);
                        resolve(settled);
                    };
                    observer.observe(document.body || document.documentElement, {
                        childList: true,
                        subtree: true,
                        attributes: true,
                    });
                    timer = setTimeout(done, quietMs, true);
                    const cap = setTimeout(done, maxWait, false);
                })
            """, [quiet_ms, max_wait])
        except PlaywrightError as e:
            logger.debug(f"DOM mutation wait failed: {e}")
            return False

    @staticmethod
    async def wait_for_first(waiters: Dict[str, Awaitable], timeout_ms: int) -> Optional[str]:
        """
        Race named awaitables and return the name of the first to finish.

        Losers are cancelled and their exceptions retrieved. A waiter that
        raises (e.g. a Playwright timeout) does not count as a winner.

        Args:
            waiters: Mapping of name → awaitable
            timeout_ms: Overall timeout in ms

        Returns:
            Name of the first waiter that completed cleanly, or None
        """
        tasks = {asyncio.ensure_future(aw): name for name, aw in waiters.items()}
        pending = set(tasks)
        winner = None
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000

        try:
            while pending and winner is None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    if not task.cancelled() and task.exception() is None:
                        winner = tasks[task]
                        break
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        return winner

    @staticmethod
    async def wait_for_selector(page: Page, selector: str, timeout: int = 5000,
                                state: str = 'visible') -> bool:
        """
        Wait for a selector to appear.

        Returns:
            True if element found, False on timeout or invalid selector
        """
        try:
            await page.wait_for_selector(selector, timeout=timeout, state=state)
            return True
        except PlaywrightError:
            return False
