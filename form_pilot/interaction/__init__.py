"""Question providers and human answer channels."""

from .question_provider import (
    QuestionRequest, QuestionResponse, QuestionProvider,
    TemplateQuestionProvider, OpenAIQuestionProvider, build_provider,
)
from .answer_channel import (
    AnswerChannel, ConsoleAnswerChannel, QueueAnswerChannel, is_cancellation,
)

__all__ = [
    'QuestionRequest', 'QuestionResponse', 'QuestionProvider',
    'TemplateQuestionProvider', 'OpenAIQuestionProvider', 'build_provider',
    'AnswerChannel', 'ConsoleAnswerChannel', 'QueueAnswerChannel', 'is_cancellation',
]
