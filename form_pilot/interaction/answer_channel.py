"""
Human answer channels.
Console prompts for the CLI, asyncio queues for the HTTP API.
"""

import asyncio
from typing import List, Optional

from ..config.settings import Settings


def is_cancellation(text: Optional[str]) -> bool:
    """True when an answer is one of the cancel words."""
    return (text or '').strip().lower() in Settings.CANCEL_WORDS


class AnswerChannel:
    """Base channel. ``prompt`` returns one line typed by the human."""

    def set_total(self, total: int):
        """Number of upcoming questions, for progress display."""

    async def prompt(self, text: str) -> str:
        raise NotImplementedError

    async def show(self, message: str):
        raise NotImplementedError

    async def close(self):
        pass


class ConsoleAnswerChannel(AnswerChannel):
    """Stdin/stdout channel with a [n/total] progress prefix."""

    def __init__(self):
        self.total = 0
        self.count = 0

    def set_total(self, total: int):
        self.total = total
        self.count = 0

    async def prompt(self, text: str) -> str:
        self.count += 1
        progress = f"[{self.count}/{self.total}] " if self.total and self.count <= self.total else ""
        question = text.strip().rstrip(':')
        loop = asyncio.get_running_loop()
        answer = await loop.run_in_executor(None, input, f"\n{progress}{question}: ")
        return answer.strip()

    async def show(self, message: str):
        print(message)


class QueueAnswerChannel(AnswerChannel):
    """
    Channel fed from outside the run.

    Questions are published on ``questions``; answers are pushed with
    ``answer()``. Messages shown to the human accumulate in ``messages``.
    """

    def __init__(self):
        self.questions: asyncio.Queue = asyncio.Queue()
        self.answers: asyncio.Queue = asyncio.Queue()
        self.messages: List[str] = []
        self.pending_question: Optional[str] = None
        self.closed = False

    async def prompt(self, text: str) -> str:
        self.pending_question = text
        await self.questions.put(text)
        answer = await self.answers.get()
        self.pending_question = None
        return (answer or '').strip()

    async def answer(self, text: str):
        await self.answers.put(text)

    async def show(self, message: str):
        self.messages.append(message)

    async def close(self):
        self.closed = True
        self.pending_question = None
