"""
Form Submitter - Trigger submission and observe the outcome.
"""

import asyncio
from typing import Optional

from playwright.async_api import Page, Error as PlaywrightError

from ..analyzer.error_detector import ValidationErrorDetector
from ..config.settings import Settings
from ..exceptions import SubmitError
from ..utils.dom_utils import DOMUtils
from ..utils.logger import logger
from ..utils.wait_utils import WaitUtils


KEYWORD_BUTTON_JS = r"""
(keywords) => {
    const visible = (el) => {
        const style = window.getComputedStyle(el);
        const rect = el.getBoundingClientRect();
        return style.display !== 'none' && style.visibility !== 'hidden'
            && style.opacity !== '0' && rect.width > 0 && rect.height > 0;
    };
    const matches = (el) => {
        const text = [el.textContent, el.value, el.getAttribute('aria-label')]
            .filter(Boolean).join(' ').toLowerCase();
        const cls = (el.getAttribute('class') || '').toLowerCase();
        return keywords.some(k => text.includes(k)) || cls.includes('submit');
    };
    const candidates = Array.from(document.querySelectorAll(
        'button, input[type="button"], [role="button"]'
    )).filter(el => !el.disabled && visible(el) && matches(el));
    const midline = window.innerHeight / 2;
    const lower = candidates.filter(el => {
        const rect = el.getBoundingClientRect();
        return rect.top + rect.height / 2 >= midline;
    });
    return lower[0] || candidates[0] || null;
}
"""

FORM_SUBMIT_JS = """
() => {
    const form = document.querySelector('form');
    if (!form) return null;
    if (typeof form.requestSubmit === 'function') {
        form.requestSubmit();
        return 'requestSubmit';
    }
    form.submit();
    return 'submit';
}
"""


class FormSubmitter:
    """Finds and triggers the form's submit mechanism."""

    def __init__(self, page: Page, detector: Optional[ValidationErrorDetector] = None):
        self.page = page
        self.detector = detector or ValidationErrorDetector(page)
        self._navigation: Optional[asyncio.Future] = None

    async def submit(self):
        """
        Trigger submission.

        Order: prioritized submit selectors, then visible keyword buttons
        (lower half of the viewport preferred), then the form element. A
        control that cannot be clicked (covered by an overlay, detached)
        moves on to the next step.

        Raises:
            SubmitError: Nothing on the page can submit the form
        """
        self._arm_navigation_watch()

        for step in (self._click_submit_selector, self._click_keyword_button):
            if await step() or self._navigated():
                return

        try:
            method = await self.page.evaluate(FORM_SUBMIT_JS)
        except PlaywrightError as e:
            # Submitting can tear down the evaluation context
            logger.debug(f"Submit interrupted by navigation: {e}")
            return

        if method is None:
            self._disarm_navigation_watch()
            raise SubmitError("No submit control or form element found")
        logger.success(f"Submitted form via form.{method}()")

    async def observe_outcome(self, timeout: Optional[int] = None) -> bool:
        """
        Race navigation, a success indicator and an error indicator, then
        decide with ``is_submitted()``.

        Args:
            timeout: Race timeout in ms

        Returns:
            True if the submission went through
        """
        timeout = timeout or Settings.SUBMIT_WAIT_TIMEOUT
        if self._navigation is None:
            self._arm_navigation_watch(timeout)

        winner = await WaitUtils.wait_for_first({
            'navigation': self._navigation,
            'success': self.page.wait_for_selector(
                ', '.join(Settings.SUCCESS_SELECTORS), state='visible', timeout=timeout
            ),
            'error': self.page.wait_for_selector(
                ', '.join(Settings.ERROR_INDICATOR_SELECTORS), state='visible', timeout=timeout
            ),
        }, timeout)
        self._navigation = None
        logger.debug(f"Submit outcome signal: {winner or 'timeout'}")

        if winner == 'navigation':
            try:
                await self.page.wait_for_load_state('domcontentloaded', timeout=timeout)
            except PlaywrightError as e:
                logger.debug(f"Load state wait after navigation failed: {e}")

        return await self.detector.is_submitted()

    def _arm_navigation_watch(self, timeout: Optional[int] = None):
        self._disarm_navigation_watch()
        self._navigation = asyncio.ensure_future(self.page.wait_for_event(
            'framenavigated',
            predicate=lambda frame: frame == self.page.main_frame,
            timeout=timeout or Settings.SUBMIT_WAIT_TIMEOUT,
        ))

    def _disarm_navigation_watch(self):
        if self._navigation is not None and not self._navigation.done():
            self._navigation.cancel()
        self._navigation = None

    def _navigated(self) -> bool:
        """True once the armed watch has seen the main frame navigate."""
        watch = self._navigation
        return watch is not None and watch.done() and not watch.cancelled() and watch.exception() is None

    async def _click_submit_selector(self) -> bool:
        for selector in Settings.SUBMIT_SELECTORS:
            button = await DOMUtils.first_match(self.page, selector)
            if button is None or not await DOMUtils.is_visible(button):
                continue
            try:
                if not await button.is_enabled():
                    continue
                await button.click(timeout=Settings.ELEMENT_RESOLVE_TIMEOUT)
            except PlaywrightError as e:
                logger.debug(f"Submit control {selector} not clickable: {e}")
                if self._navigated():
                    return True
                continue
            logger.success(f"Clicked submit button: {selector}")
            return True
        return False

    async def _click_keyword_button(self) -> bool:
        try:
            handle = await self.page.evaluate_handle(KEYWORD_BUTTON_JS, Settings.SUBMIT_KEYWORDS)
        except PlaywrightError as e:
            logger.debug(f"Keyword button scan failed: {e}")
            return False
        button = handle.as_element()
        if button is None:
            return False
        try:
            text = (await button.text_content() or '').strip()
            await button.click(timeout=Settings.ELEMENT_RESOLVE_TIMEOUT)
        except PlaywrightError as e:
            logger.debug(f"Keyword button not clickable: {e}")
            return False
        logger.success(f'Clicked button "{text}"')
        return True
