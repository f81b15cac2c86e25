"""
HTTP API for driving form runs from a browser UI.

Each run gets a QueueAnswerChannel: the client polls for the pending
question and posts answers back.
"""

import asyncio
import uuid
from dataclasses import dataclass, field as dataclass_field
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ...engine.form_runner import FormRunner, FormRunResult
from ...interaction.answer_channel import QueueAnswerChannel
from ...interaction.question_provider import build_provider
from ...utils.logger import logger


app = FastAPI(title="Form Pilot API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # dev UI runs on another port
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class StartRequest(BaseModel):
    url: str
    headless: bool = True
    use_ai: bool = False
    tone: Optional[str] = None
    max_attempts: Optional[int] = None
    timeout: Optional[int] = None


class AnswerRequest(BaseModel):
    answer: str


@dataclass
class RunRecord:
    run_id: str
    url: str
    channel: QueueAnswerChannel
    task: Optional[asyncio.Task] = None
    answered: int = dataclass_field(default=0)

    @property
    def finished(self) -> bool:
        return self.task is not None and self.task.done()

    @property
    def result(self) -> Optional[FormRunResult]:
        if not self.finished or self.task.cancelled():
            return None
        return self.task.result()

    def to_status(self) -> Dict:
        result = self.result
        return {
            'run_id': self.run_id,
            'url': self.url,
            'status': 'finished' if self.finished else 'running',
            'pending_question': None if self.finished else self.channel.pending_question,
            'messages': list(self.channel.messages),
            'answered': self.answered,
            'result_status': result.status.value if result else None,
        }


runs: Dict[str, RunRecord] = {}


def _get_run(run_id: str) -> RunRecord:
    record = runs.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    return record


@app.post("/runs")
async def start_run(req: StartRequest):
    channel = QueueAnswerChannel()
    runner = FormRunner(
        provider=build_provider(req.use_ai),
        channel=channel,
        max_attempts=req.max_attempts,
        tone=req.tone,
    )

    record = RunRecord(run_id=uuid.uuid4().hex[:12], url=req.url, channel=channel)
    record.task = asyncio.create_task(
        runner.run_form(req.url, timeout=req.timeout, headless=req.headless)
    )
    runs[record.run_id] = record
    logger.info(f"Started run {record.run_id} for {req.url}")
    return {'run_id': record.run_id, 'status': 'running', 'url': req.url}


@app.get("/runs/{run_id}")
async def get_run(run_id: str):
    return _get_run(run_id).to_status()


@app.post("/runs/{run_id}/answer")
async def post_answer(run_id: str, req: AnswerRequest):
    record = _get_run(run_id)
    if record.finished:
        raise HTTPException(status_code=409, detail="Run already finished")
    if record.channel.pending_question is None:
        raise HTTPException(status_code=409, detail="No question is waiting for an answer")

    await record.channel.answer(req.answer)
    record.answered += 1
    return {'status': 'accepted', 'run_id': run_id}


@app.get("/runs/{run_id}/result")
async def get_result(run_id: str):
    record = _get_run(run_id)
    if not record.finished:
        raise HTTPException(status_code=409, detail="Run still in progress")
    result = record.result
    if result is None:
        raise HTTPException(status_code=500, detail="Run was cancelled")
    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
