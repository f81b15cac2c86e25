"""
Tests for question providers.
"""

from types import SimpleNamespace

import pytest
from openai import OpenAIError

from form_pilot.config.settings import Settings
from form_pilot.interaction.question_provider import (
    OpenAIQuestionProvider, QuestionRequest, TemplateQuestionProvider,
    build_provider, fallback_question,
)


class FakeCompletions:
    """Stands in for client.chat.completions; pops one scripted reply per call."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(replies):
    completions = FakeCompletions(replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def make_provider(replies):
    client, completions = fake_client(replies)
    provider = OpenAIQuestionProvider(api_key='test', model='gpt-test', client=client)
    provider.retry_delay = 0
    return provider, completions


def test_fallback_question_keywords():
    assert fallback_question('Work Email') == "What is your email address?"
    assert fallback_question('Zip code') == "What is your zip/postal code?"
    assert fallback_question('Favourite colour') == "Please provide a value for Favourite colour:"


@pytest.mark.asyncio
async def test_template_provider_always_succeeds():
    response = await TemplateQuestionProvider().ask(QuestionRequest(label='Phone'))
    assert response.success
    assert response.question == "What is your phone number?"


@pytest.mark.asyncio
async def test_openai_provider_returns_generated_question():
    provider, completions = make_provider(["  What's your email?  "])
    response = await provider.ask(QuestionRequest(label='Email', tone='formal', placeholder='you@x.com'))

    assert response.success
    assert response.question == "What's your email?"
    call = completions.calls[0]
    assert call['model'] == 'gpt-test'
    assert 'formal' in call['messages'][0]['content']
    assert 'you@x.com' in call['messages'][1]['content']


@pytest.mark.asyncio
async def test_openai_provider_retries_then_reports_failure():
    replies = [OpenAIError("rate limited")] * Settings.QUESTION_MAX_RETRIES
    provider, completions = make_provider(replies)
    response = await provider.ask(QuestionRequest(label='Email'))

    assert not response.success
    assert response.error == "rate limited"
    assert len(completions.calls) == Settings.QUESTION_MAX_RETRIES


@pytest.mark.asyncio
async def test_openai_provider_recovers_after_empty_reply():
    provider, completions = make_provider(["", "Your name?"])
    response = await provider.ask(QuestionRequest(label='Name'))

    assert response.success
    assert response.question == "Your name?"
    assert len(completions.calls) == 2


@pytest.mark.asyncio
async def test_correction_falls_back_to_template():
    replies = [OpenAIError("down")] * Settings.QUESTION_MAX_RETRIES
    provider, _ = make_provider(replies)
    response = await provider.correction_ask('email', 'Email', 'bad', 'Invalid email')

    assert response.success
    assert response.question == 'Please provide a corrected value for "Email" (Error: Invalid email):'


def test_build_provider_without_key(monkeypatch):
    monkeypatch.setattr(Settings, 'OPENAI_API_KEY', None)
    assert isinstance(build_provider(use_ai=True), TemplateQuestionProvider)
    assert isinstance(build_provider(use_ai=False), TemplateQuestionProvider)
