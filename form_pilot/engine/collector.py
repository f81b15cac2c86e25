"""
Response Collector - Ask the human for every field and validate answers.
"""

from dataclasses import replace
from typing import Awaitable, Callable, List, Optional

from ..config.settings import Settings
from ..exceptions import UserCancelledError
from ..interaction.answer_channel import AnswerChannel, is_cancellation
from ..interaction.question_provider import QuestionProvider, QuestionRequest
from ..models.answer import ResponseCache
from ..models.field import Field, FieldType
from ..utils.logger import logger
from ..utils.text_utils import sanitize_input
from .field_types import OptionSource, capability_for
from .validators import validate_answer


OptionResolver = Callable[[Field], Awaitable[List[str]]]


def context_sentence(field: Field) -> str:
    """Short description of a field passed to the question provider."""
    parts = []
    if field.is_option_bearing():
        parts.append("This is a dropdown selection" if field.field_type == FieldType.SELECT
                     else "This is a multiple choice question")
    elif field.field_type in (FieldType.CHECKBOX, FieldType.RADIO):
        parts.append("This is a yes/no question")
    if field.required:
        parts.append("This field is required")
    if field.placeholder:
        parts.append(f"Placeholder: {field.placeholder}")
    return ". ".join(parts)


def decorate_question(question: str, field: Field) -> str:
    """Append required marker, placeholder and numbered options."""
    text = question.strip()
    if field.required:
        text += " (required)"
    if field.placeholder:
        text += f" [{field.placeholder}]"
    if field.options:
        listing = "\n".join(f"  {i}. {option}" for i, option in enumerate(field.options, 1))
        text += f"\n{listing}\n"
    elif field.field_type in (FieldType.CHECKBOX, FieldType.RADIO):
        text += " (yes/no)"
    return text


class ResponseCollector:
    """Collects one validated answer per fillable field."""

    def __init__(self, provider: QuestionProvider, channel: AnswerChannel,
                 option_resolver: Optional[OptionResolver] = None,
                 tone: Optional[str] = None):
        self.provider = provider
        self.channel = channel
        self.option_resolver = option_resolver
        self.tone = tone or Settings.QUESTION_TONE

    async def collect(self, fields: List[Field], cache: ResponseCache) -> ResponseCache:
        """
        Ask for every field not already answered.

        Args:
            fields: Discovered fields, in order
            cache: Run-owned answer cache, updated in place

        Returns:
            The same cache

        Raises:
            UserCancelledError: The human typed a cancel word
        """
        logger.step(5, "Collecting answers")
        pending = [f for f in fields if f.identity not in cache and f.field_type != FieldType.HIDDEN]
        self.channel.set_total(sum(1 for f in pending if f.is_fillable()))

        for field in pending:
            if field.field_type == FieldType.FILE:
                await self.channel.show(f"Skipping file upload field: {field.label}")
                continue

            field = await self._with_options(field)
            question = decorate_question(await self._question_for(field), field)
            value = await self._ask_until_valid(field, question)
            cache.set(field.identity, value, field.label)

        logger.metric("Answers collected", len(cache))
        return cache

    async def _with_options(self, field: Field) -> Field:
        """Load custom dropdown options through the resolver."""
        if capability_for(field).option_source != OptionSource.WIDGET or field.options:
            return field
        if self.option_resolver is None:
            return field
        options = await self.option_resolver(field)
        if not options:
            return field
        return replace(field, options=tuple(options))

    async def _question_for(self, field: Field) -> str:
        fallback = f"Please provide your {field.label}:"
        request = QuestionRequest(
            label=field.label,
            field_type=field.field_type.value,
            tone=self.tone,
            context=context_sentence(field),
            placeholder=field.placeholder,
        )
        try:
            response = await self.provider.ask(request)
        except Exception as e:
            # Question wording must never block collection
            logger.warning(f"Question provider failed for {field.label}: {e}")
            return fallback
        if not response.success or not response.question.strip():
            return fallback
        return response.question

    async def _ask_until_valid(self, field: Field, question: str) -> str:
        while True:
            raw = await self.channel.prompt(question)
            if is_cancellation(raw):
                raise UserCancelledError(f"Cancelled at {field.label}")

            result = validate_answer(field, sanitize_input(raw))
            if result.is_valid:
                return result.value
            await self.channel.show(result.message)
