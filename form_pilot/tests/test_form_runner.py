"""
Tests for the run orchestration, with the browser and discovery replaced.
"""

import pytest

from form_pilot.engine import form_runner
from form_pilot.engine.form_runner import FormRunner, RunStatus
from form_pilot.interaction.answer_channel import AnswerChannel
from form_pilot.interaction.question_provider import TemplateQuestionProvider
from form_pilot.models.field import Field, FieldType


NAME = Field(label='Name', selector='#name', field_type=FieldType.TEXT, name='name')


class ScriptedChannel(AnswerChannel):
    def __init__(self, answers=()):
        self.answers = list(answers)
        self.prompts = []
        self.shown = []
        self.closed = False

    async def prompt(self, text):
        self.prompts.append(text)
        return self.answers.pop(0) if self.answers else ""

    async def show(self, message):
        self.shown.append(message)

    async def close(self):
        self.closed = True


class FakePage:
    url = 'https://example.com/form'


class FakeBrowserManager:
    instances = []

    def __init__(self, headless=None):
        self.closed = False
        FakeBrowserManager.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def new_page(self):
        return FakePage()


@pytest.fixture
def fake_browser(monkeypatch):
    """Replace browser, loader and discovery; returns a setter for the discovered fields."""
    FakeBrowserManager.instances = []
    state = {'fields': [], 'load_error': None}

    class FakeLoader:
        @staticmethod
        async def load(page, url, timeout=None):
            if state['load_error'] is not None:
                raise state['load_error']

    class FakeDiscovery:
        def __init__(self, page):
            self.page = page

        async def discover(self, custom_only=False):
            return list(state['fields'])

    monkeypatch.setattr(form_runner, 'BrowserManager', FakeBrowserManager)
    monkeypatch.setattr(form_runner, 'PageLoader', FakeLoader)
    monkeypatch.setattr(form_runner, 'FieldDiscovery', FakeDiscovery)
    return state


def assert_released(channel):
    assert len(FakeBrowserManager.instances) == 1
    assert FakeBrowserManager.instances[0].closed
    assert channel.closed


@pytest.mark.asyncio
async def test_page_without_fields(fake_browser):
    channel = ScriptedChannel()
    result = await FormRunner(TemplateQuestionProvider(), channel).run_form('https://example.com/form')

    assert result.status == RunStatus.NO_FIELDS
    assert not result.success
    assert result.submission is not None
    assert result.submission.result.status == 'no_fields'
    assert channel.prompts == []
    assert_released(channel)


@pytest.mark.asyncio
async def test_cancel_word_during_collection(fake_browser):
    fake_browser['fields'] = [NAME]
    channel = ScriptedChannel(['quit'])
    result = await FormRunner(TemplateQuestionProvider(), channel).run_form('https://example.com/form')

    assert result.status == RunStatus.CANCELLED
    assert result.error == 'Cancelled by user'
    assert result.answers == {}
    assert len(channel.prompts) == 1
    assert_released(channel)


@pytest.mark.asyncio
async def test_declined_confirmation(fake_browser):
    fake_browser['fields'] = [NAME]
    channel = ScriptedChannel(['no'])
    runner = FormRunner(TemplateQuestionProvider(), channel, confirm=True)
    result = await runner.run_form('https://example.com/form')

    assert result.status == RunStatus.CANCELLED
    assert result.error == 'User chose not to proceed'
    assert channel.shown
    assert_released(channel)


@pytest.mark.asyncio
async def test_load_failure_becomes_error_result(fake_browser):
    fake_browser['load_error'] = RuntimeError('boom')
    channel = ScriptedChannel()
    result = await FormRunner(TemplateQuestionProvider(), channel).run_form('https://example.com/form')

    assert result.status == RunStatus.ERROR
    assert result.error == 'boom'
    assert not result.success
    assert result.to_dict()['status'] == 'error'
    assert_released(channel)


def test_zero_attempts_is_kept():
    assert FormRunner(TemplateQuestionProvider(), ScriptedChannel(), max_attempts=0).max_attempts == 0
    assert FormRunner(TemplateQuestionProvider(), ScriptedChannel()).max_attempts == 3
