"""
Question providers.
Turn a field label into the question shown to the human, either from a
keyword template or through an OpenAI chat model.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from ..config.settings import Settings
from ..utils.logger import logger


# Keyword → question, first match wins
FALLBACK_QUESTIONS = [
    (('email',), "What is your email address?"),
    (('name',), "What is your name?"),
    (('phone',), "What is your phone number?"),
    (('password',), "Please enter your password:"),
    (('date',), "Please enter the date:"),
    (('address',), "What is your address?"),
    (('city',), "What city are you in?"),
    (('zip', 'postal'), "What is your zip/postal code?"),
    (('country',), "What country are you in?"),
    (('age',), "What is your age?"),
]

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates clear, concise questions for form fields. "
    "Generate questions that are {tone} in tone and help users understand what information is needed."
)


@dataclass(frozen=True)
class QuestionRequest:
    label: str
    field_type: str = "text"
    tone: str = "casual"
    context: str = ""
    placeholder: Optional[str] = None


@dataclass(frozen=True)
class QuestionResponse:
    question: str
    success: bool
    error: Optional[str] = None


def fallback_question(label: str) -> str:
    """Keyword-based question for a label."""
    lowered = label.lower()
    for keywords, question in FALLBACK_QUESTIONS:
        if any(keyword in lowered for keyword in keywords):
            return question
    return f"Please provide a value for {label}:"


def correction_template(field_label: str, error_message: str) -> str:
    return f'Please provide a corrected value for "{field_label}" (Error: {error_message}):'


class QuestionProvider:
    """Base provider. Subclasses implement ``ask``."""

    async def ask(self, request: QuestionRequest) -> QuestionResponse:
        raise NotImplementedError

    async def correction_ask(self, field_name: str, field_label: str,
                             current_value: str, error_message: str) -> QuestionResponse:
        return QuestionResponse(correction_template(field_label, error_message), True)


class TemplateQuestionProvider(QuestionProvider):
    """Offline provider built on keyword templates. Never fails."""

    async def ask(self, request: QuestionRequest) -> QuestionResponse:
        return QuestionResponse(fallback_question(request.label), True)


class OpenAIQuestionProvider(QuestionProvider):
    """
    Provider backed by OpenAI chat completions.

    Retries with linear backoff and reports ``success=False`` after the
    last failed attempt instead of raising.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 client: Optional[AsyncOpenAI] = None):
        self.model = model or Settings.OPENAI_MODEL
        self.client = client or AsyncOpenAI(
            api_key=api_key or Settings.OPENAI_API_KEY,
            timeout=Settings.OPENAI_TIMEOUT,
        )
        self.max_retries = Settings.QUESTION_MAX_RETRIES
        self.retry_delay = Settings.QUESTION_RETRY_DELAY

    async def ask(self, request: QuestionRequest) -> QuestionResponse:
        prompt = (
            f'Create a {request.tone} question for the form field labeled "{request.label}".\n'
        )
        if request.context:
            prompt += f"Additional context: {request.context}\n"
        if request.placeholder:
            prompt += f"Placeholder text: {request.placeholder}\n"
        prompt += "Keep the question under 100 characters and make it user-friendly."

        return await self._complete(SYSTEM_PROMPT.format(tone=request.tone), prompt, request.label)

    async def correction_ask(self, field_name: str, field_label: str,
                             current_value: str, error_message: str) -> QuestionResponse:
        prompt = (
            f'The form rejected the value "{current_value}" for the field "{field_label}" '
            f'with the error "{error_message}". Ask the user for a corrected value in one '
            f"short, friendly sentence."
        )
        response = await self._complete(SYSTEM_PROMPT.format(tone="helpful"), prompt, field_label)
        if not response.success:
            return QuestionResponse(correction_template(field_label, error_message), True)
        return response

    async def _complete(self, system_prompt: str, user_prompt: str, label: str) -> QuestionResponse:
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    max_tokens=50,
                    temperature=0.7,
                )
                content = (response.choices[0].message.content or "").strip() if response.choices else ""
                if content:
                    logger.debug(f'Generated question for "{label}": {content}')
                    return QuestionResponse(content, True)
                last_error = "No response content received from OpenAI"
            except OpenAIError as e:
                last_error = str(e)

            logger.warning(f'Question attempt {attempt} failed for "{label}": {last_error}')
            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_delay * attempt)

        logger.error(f"Failed to generate question after {self.max_retries} attempts: {last_error}")
        return QuestionResponse("", False, last_error)


def build_provider(use_ai: bool = True) -> QuestionProvider:
    """OpenAI provider when enabled and a key is configured, else templates."""
    if use_ai and Settings.OPENAI_API_KEY:
        return OpenAIQuestionProvider()
    if use_ai:
        logger.info("OPENAI_API_KEY not set, using template questions")
    return TemplateQuestionProvider()
