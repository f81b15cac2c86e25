"""
Tests for the response collection loop, using scripted channels.
"""

import pytest

from form_pilot.engine.collector import ResponseCollector, decorate_question
from form_pilot.exceptions import UserCancelledError
from form_pilot.interaction.answer_channel import AnswerChannel
from form_pilot.interaction.question_provider import (
    QuestionProvider, QuestionResponse, TemplateQuestionProvider,
)
from form_pilot.models.answer import ResponseCache
from form_pilot.models.field import Field, FieldType


class ScriptedChannel(AnswerChannel):
    """Answers prompts from a fixed list and records what was shown."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []
        self.shown = []

    async def prompt(self, text):
        self.prompts.append(text)
        return self.answers.pop(0)

    async def show(self, message):
        self.shown.append(message)


class FailingProvider(QuestionProvider):
    async def ask(self, request):
        return QuestionResponse("", False, "offline")


def make_field(label, field_type=FieldType.TEXT, **kwargs):
    return Field(label=label, selector=f'#{label.lower()}', field_type=field_type,
                 name=label.lower(), **kwargs)


@pytest.mark.asyncio
async def test_reprompts_until_valid():
    channel = ScriptedChannel(["not-an-email", "a@b.co"])
    collector = ResponseCollector(TemplateQuestionProvider(), channel)
    cache = ResponseCache()

    await collector.collect([make_field('Email', FieldType.EMAIL)], cache)

    assert cache.get('email') == 'a@b.co'
    assert len(channel.prompts) == 2
    assert channel.shown == ["Please provide a valid email address."]


@pytest.mark.asyncio
async def test_option_answer_is_normalized():
    channel = ScriptedChannel(["2"])
    collector = ResponseCollector(TemplateQuestionProvider(), channel)
    cache = ResponseCache()

    field = make_field('Color', FieldType.SELECT, options=('Red', 'Green', 'Blue'))
    await collector.collect([field], cache)

    assert cache.get('color') == 'Green'
    assert "2. Green" in channel.prompts[0]


@pytest.mark.asyncio
async def test_cancel_word_raises():
    channel = ScriptedChannel(["  QUIT "])
    collector = ResponseCollector(TemplateQuestionProvider(), channel)

    with pytest.raises(UserCancelledError):
        await collector.collect([make_field('Name')], ResponseCache())


@pytest.mark.asyncio
async def test_cached_and_file_fields_are_skipped():
    channel = ScriptedChannel(["Ada"])
    collector = ResponseCollector(TemplateQuestionProvider(), channel)
    cache = ResponseCache()
    cache.set('email', 'a@b.co')

    fields = [
        make_field('Email', FieldType.EMAIL),
        make_field('Resume', FieldType.FILE),
        make_field('Name'),
    ]
    await collector.collect(fields, cache)

    assert len(channel.prompts) == 1
    assert cache.get('name') == 'Ada'
    assert 'resume' not in cache
    assert any('Resume' in message for message in channel.shown)


@pytest.mark.asyncio
async def test_unnamed_fields_with_same_label_keep_separate_answers():
    first = Field(label='Text Field', selector='form > input:nth-of-type(1)', field_type=FieldType.TEXT)
    second = Field(label='Text Field', selector='form > input:nth-of-type(2)', field_type=FieldType.TEXT)
    channel = ScriptedChannel(["first answer", "second answer"])
    collector = ResponseCollector(TemplateQuestionProvider(), channel)
    cache = ResponseCache()

    await collector.collect([first, second], cache)

    assert len(channel.prompts) == 2
    assert len(cache) == 2
    assert cache.get(first.identity) == 'first answer'
    assert cache.get(second.identity) == 'second answer'


@pytest.mark.asyncio
async def test_provider_failure_uses_template():
    channel = ScriptedChannel(["Berlin"])
    collector = ResponseCollector(FailingProvider(), channel)

    await collector.collect([make_field('City', required=True)], ResponseCache())

    assert channel.prompts[0] == "Please provide your City: (required)"


@pytest.mark.asyncio
async def test_custom_dropdown_options_come_from_resolver():
    async def resolver(field):
        return ['Small', 'Large']

    channel = ScriptedChannel(["lar"])
    collector = ResponseCollector(TemplateQuestionProvider(), channel, option_resolver=resolver)
    cache = ResponseCache()

    await collector.collect([make_field('Size', FieldType.SELECT, is_custom=True)], cache)
    assert cache.get('size') == 'Large'


def test_decorate_question_adds_placeholder():
    field = make_field('Phone', FieldType.TEL, placeholder='+1 555 0100')
    assert decorate_question("What is your phone number?", field) == \
        "What is your phone number? [+1 555 0100]"
