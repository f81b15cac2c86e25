"""
Form Runner - Orchestrates one complete conversational form fill.

Pipeline:
1. Launch browser
2. Load & stabilize page
3-4. Discover fields
5. Collect answers
6. Fill fields
7. Submit, detect errors and correct
"""

import time
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Dict, List, Optional, Any

from ..analyzer.error_detector import ValidationErrorDetector
from ..analyzer.field_discovery import FieldDiscovery
from ..analyzer.form_summary import summarize_fields, format_summary
from ..browser.browser_manager import BrowserManager
from ..browser.page_loader import PageLoader
from ..config.settings import Settings
from ..exceptions import UserCancelledError
from ..interaction.answer_channel import AnswerChannel, is_cancellation
from ..interaction.question_provider import QuestionProvider
from ..models.answer import ResponseCache
from ..models.submission import Submission, SubmissionResult
from ..models.validation_error import ValidationError
from ..utils.logger import logger
from ..utils.text_utils import is_truthy
from .collector import ResponseCollector
from .filler import FieldFiller
from .recovery import SubmissionStateMachine, SubmissionState
from .submitter import FormSubmitter


class RunStatus(str, Enum):
    SUBMITTED = "submitted"
    AMBIGUOUS = "ambiguous"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    NO_FIELDS = "no_fields"
    ERROR = "error"


STATE_TO_STATUS = {
    SubmissionState.SUBMITTED: RunStatus.SUBMITTED,
    SubmissionState.AMBIGUOUS: RunStatus.AMBIGUOUS,
    SubmissionState.EXHAUSTED: RunStatus.EXHAUSTED,
    SubmissionState.CANCELLED: RunStatus.CANCELLED,
}


@dataclass
class FormRunResult:
    """Structured outcome of one run."""

    success: bool
    status: RunStatus
    answers: Dict[str, str] = dataclass_field(default_factory=dict)
    error: Optional[str] = None
    validation_errors: List[ValidationError] = dataclass_field(default_factory=list)
    submission: Optional[Submission] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'status': self.status.value,
            'answers': dict(self.answers),
            'error': self.error,
            'validation_errors': [e.to_dict() for e in self.validation_errors],
            'submission': self.submission.to_dict() if self.submission else None,
            'duration_ms': round(self.duration_ms, 2),
        }


class FormRunner:
    """Runs discovery, collection, filling and submission for one URL."""

    def __init__(self, provider: QuestionProvider, channel: AnswerChannel,
                 confirm: bool = False, max_attempts: Optional[int] = None,
                 tone: Optional[str] = None):
        self.provider = provider
        self.channel = channel
        self.confirm = confirm
        self.max_attempts = Settings.MAX_SUBMIT_ATTEMPTS if max_attempts is None else max_attempts
        self.tone = tone or Settings.QUESTION_TONE

    async def run_form(self, url: str, timeout: Optional[int] = None,
                       headless: Optional[bool] = None) -> FormRunResult:
        """
        Fill and submit the form at ``url``.

        Never raises: every failure becomes a FormRunResult with
        ``success=False`` and a reason. Browser and answer channel are
        released on every path.

        Args:
            url: Form page URL
            timeout: Page load timeout in ms
            headless: Override headless setting

        Returns:
            FormRunResult
        """
        start_time = time.time()
        cache = ResponseCache()

        logger.info("=" * 60)
        logger.info(f"Form Pilot - {url}")
        logger.info("=" * 60)

        try:
            async with BrowserManager(headless=headless) as browser_manager:
                page = await browser_manager.new_page()
                await PageLoader.load(page, url, timeout=timeout)

                discovery = FieldDiscovery(page)
                fields = await discovery.discover()
                if not fields:
                    return self._result(RunStatus.NO_FIELDS, cache, url, start_time,
                                        error="No form fields found on the page")

                summary = summarize_fields(fields)
                logger.metric("Complexity", summary['complexity'])
                logger.metric("Accessibility score", summary['accessibility']['score'])
                for issue in summary['accessibility']['issues']:
                    logger.warning(f"Accessibility: {issue}")

                if self.confirm and not await self._confirm(summary):
                    return self._result(RunStatus.CANCELLED, cache, url, start_time,
                                        error="User chose not to proceed")

                filler = FieldFiller(page)
                collector = ResponseCollector(
                    self.provider, self.channel,
                    option_resolver=filler.read_custom_options, tone=self.tone,
                )
                await collector.collect(fields, cache)
                await filler.fill_all(fields, cache)

                detector = ValidationErrorDetector(page)
                machine = SubmissionStateMachine(
                    fields, cache,
                    submitter=FormSubmitter(page, detector),
                    detector=detector,
                    filler=filler,
                    provider=self.provider,
                    channel=self.channel,
                    discovery=discovery,
                    max_attempts=self.max_attempts,
                )
                outcome = await machine.run()

                status = STATE_TO_STATUS[outcome.state]
                return self._result(
                    status, cache, url, start_time,
                    error=None if outcome.success else outcome.reason,
                    errors=outcome.errors,
                    attempts=outcome.attempts,
                    final_url=page.url,
                    message=outcome.reason,
                )

        except UserCancelledError as e:
            logger.info(f"Run cancelled: {e}")
            return self._result(RunStatus.CANCELLED, cache, url, start_time, error="Cancelled by user")
        except Exception as e:
            logger.error(f"Form run failed: {e}")
            return self._result(RunStatus.ERROR, cache, url, start_time, error=str(e))
        finally:
            await self.channel.close()

    async def _confirm(self, summary: Dict[str, Any]) -> bool:
        await self.channel.show(format_summary(summary))
        self.channel.set_total(0)
        answer = await self.channel.prompt("Would you like to proceed with filling out this form? (yes/no)")
        if is_cancellation(answer) or not is_truthy(answer):
            logger.info("User chose not to proceed")
            return False
        return True

    def _result(self, status: RunStatus, cache: ResponseCache, url: str, start_time: float,
                error: Optional[str] = None, errors: Optional[List[ValidationError]] = None,
                attempts: int = 0, final_url: Optional[str] = None,
                message: str = "") -> FormRunResult:
        success = status == RunStatus.SUBMITTED
        submission = Submission(answers=cache.answers(), url=url).with_result(SubmissionResult(
            success=success,
            status=status.value,
            message=message or error or "",
            url=final_url,
            attempts=attempts,
            errors=list(errors or []),
        ))
        duration_ms = (time.time() - start_time) * 1000

        if success:
            logger.success(f"Form submitted in {duration_ms:.0f}ms after {attempts} attempt(s)")
        else:
            logger.warning(f"Run finished with status {status.value}: {error}")

        return FormRunResult(
            success=success,
            status=status,
            answers=cache.as_dict(),
            error=error,
            validation_errors=list(errors or []),
            submission=submission,
            duration_ms=duration_ms,
        )
