"""
Tests for the HTTP API and its queue-backed answer channel.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from form_pilot.interaction.answer_channel import QueueAnswerChannel
from form_pilot.web_app.api.server import app, runs, RunRecord


client = TestClient(app)


def test_unknown_run_is_404():
    assert client.get("/runs/nope").status_code == 404
    assert client.get("/runs/nope/result").status_code == 404
    assert client.post("/runs/nope/answer", json={'answer': 'x'}).status_code == 404


def test_answer_without_pending_question_is_409():
    runs['idle'] = RunRecord(run_id='idle', url='https://example.com', channel=QueueAnswerChannel())
    try:
        response = client.post("/runs/idle/answer", json={'answer': 'Ada'})
        assert response.status_code == 409

        status = client.get("/runs/idle").json()
        assert status['status'] == 'running'
        assert status['pending_question'] is None

        assert client.get("/runs/idle/result").status_code == 409
    finally:
        runs.pop('idle', None)


def test_start_request_requires_url():
    assert client.post("/runs", json={}).status_code == 422


@pytest.mark.asyncio
async def test_queue_channel_round_trip():
    channel = QueueAnswerChannel()
    prompt = asyncio.create_task(channel.prompt("What is your name?"))

    assert await channel.questions.get() == "What is your name?"
    assert channel.pending_question == "What is your name?"

    await channel.answer("  Ada  ")
    assert await prompt == "Ada"
    assert channel.pending_question is None

    await channel.show("Thanks")
    await channel.close()
    assert channel.messages == ["Thanks"]
    assert channel.closed
