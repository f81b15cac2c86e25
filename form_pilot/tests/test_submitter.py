"""
Tests for the submit trigger chain and the outcome race.
"""

import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from form_pilot.browser.browser_manager import BrowserManager
from form_pilot.config.settings import Settings
from form_pilot.engine.submitter import FormSubmitter
from form_pilot.exceptions import SubmitError


class FakeButton:
    """Clickable control; ``blocked`` makes every click time out like a covered element."""

    def __init__(self, text='Submit', blocked=False, on_click=None):
        self.text = text
        self.blocked = blocked
        self.on_click = on_click
        self.clicks = 0

    async def is_visible(self):
        return True

    async def bounding_box(self):
        return {'x': 0, 'y': 0, 'width': 80, 'height': 24}

    async def is_enabled(self):
        return True

    async def text_content(self):
        return self.text

    async def click(self, timeout=None):
        self.clicks += 1
        if self.on_click is not None:
            await self.on_click()
        if self.blocked:
            raise PlaywrightTimeoutError('<div class="overlay"> intercepts pointer events')


class FakeHandle:
    def __init__(self, element):
        self.element = element

    def as_element(self):
        return self.element


class FakePage:
    """Records which submit mechanisms were tried, in order."""

    def __init__(self, buttons=None, keyword_button=None, form_method='requestSubmit'):
        self.buttons = buttons or {}
        self.keyword_button = keyword_button
        self.form_method = form_method
        self.main_frame = object()
        self.navigated = asyncio.Event()
        self.calls = []

    async def query_selector(self, selector):
        return self.buttons.get(selector)

    async def evaluate_handle(self, script, *args):
        self.calls.append('keyword')
        return FakeHandle(self.keyword_button)

    async def evaluate(self, script, *args):
        self.calls.append('form')
        return self.form_method

    async def wait_for_event(self, event, predicate=None, timeout=None):
        await self.navigated.wait()
        return self.main_frame


class NoDetector:
    async def is_submitted(self):
        return False


@pytest.mark.asyncio
async def test_covered_controls_fall_through_to_form_submit():
    submit_button = FakeButton(blocked=True)
    keyword_button = FakeButton('Send', blocked=True)
    page = FakePage(buttons={'button[type="submit"]': submit_button}, keyword_button=keyword_button)
    submitter = FormSubmitter(page, NoDetector())

    await submitter.submit()

    assert submit_button.clicks == 1
    assert keyword_button.clicks == 1
    assert page.calls == ['keyword', 'form']
    submitter._disarm_navigation_watch()


@pytest.mark.asyncio
async def test_keyword_button_when_no_submit_selector_matches():
    keyword_button = FakeButton('Continue')
    page = FakePage(keyword_button=keyword_button)
    submitter = FormSubmitter(page, NoDetector())

    await submitter.submit()

    assert keyword_button.clicks == 1
    assert page.calls == ['keyword']
    submitter._disarm_navigation_watch()


@pytest.mark.asyncio
async def test_navigation_during_failed_click_ends_the_chain():
    page = FakePage()

    async def navigate():
        page.navigated.set()
        await asyncio.sleep(0.01)

    page.buttons['input[type="submit"]'] = FakeButton(blocked=True, on_click=navigate)
    submitter = FormSubmitter(page, NoDetector())

    await submitter.submit()

    assert page.calls == []
    submitter._disarm_navigation_watch()


@pytest.mark.asyncio
async def test_nothing_to_submit_raises():
    page = FakePage(form_method=None)
    submitter = FormSubmitter(page, NoDetector())

    with pytest.raises(SubmitError):
        await submitter.submit()

    assert page.calls == ['keyword', 'form']
    assert submitter._navigation is None


SUCCESS_FORM = """
<!DOCTYPE html>
<html>
<head>
    <style>
        .overlay { position: fixed; top: 0; left: 0; width: 100%; height: 100%; z-index: 10; }
    </style>
    <script>
        function done(event) {
            event.preventDefault();
            const note = document.createElement('div');
            note.className = 'success-message';
            note.textContent = 'Thanks!';
            document.body.appendChild(note);
        }
    </script>
</head>
<body>
    <form onsubmit="done(event)">
        <input name="email" value="a@b.co">
        <button type="submit">Send</button>
    </form>
    {overlay}
</body>
</html>
"""


@pytest.mark.asyncio
async def test_success_message_wins_the_outcome_race():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(SUCCESS_FORM.replace('{overlay}', ''))
        submitter = FormSubmitter(page)

        await submitter.submit()

        assert await submitter.observe_outcome() is True
        assert await page.text_content('.success-message') == 'Thanks!'


@pytest.mark.asyncio
async def test_overlay_over_button_still_submits(monkeypatch):
    monkeypatch.setattr(Settings, 'ELEMENT_RESOLVE_TIMEOUT', 500)
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(SUCCESS_FORM.replace('{overlay}', '<div class="overlay"></div>'))
        submitter = FormSubmitter(page)

        await submitter.submit()

        assert await submitter.observe_outcome() is True
