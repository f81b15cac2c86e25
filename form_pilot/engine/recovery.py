"""
Submission state machine.

Drives submit → outcome → correction rounds until the form is accepted,
the outcome is ambiguous, attempts run out or the human cancels.
"""

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from ..analyzer.error_detector import ValidationErrorDetector
from ..analyzer.field_discovery import FieldDiscovery
from ..config.settings import Settings
from ..exceptions import DiscoveryError, SubmitError, FormPilotError
from ..interaction.answer_channel import AnswerChannel, is_cancellation
from ..interaction.question_provider import QuestionProvider, correction_template
from ..models.answer import ResponseCache
from ..models.field import Field, normalize_field_name
from ..models.validation_error import ValidationError
from ..utils.logger import logger
from ..utils.text_utils import sanitize_input, strip_required_marker
from .filler import FieldFiller, FillStatus
from .submitter import FormSubmitter
from .validators import validate_answer


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    ERRORS_DETECTED = "errors_detected"
    CORRECTING = "correcting"
    AMBIGUOUS = "ambiguous"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: Dict[SubmissionState, FrozenSet[SubmissionState]] = {
    SubmissionState.IDLE: frozenset({SubmissionState.SUBMITTING}),
    SubmissionState.SUBMITTING: frozenset({
        SubmissionState.SUBMITTED,
        SubmissionState.ERRORS_DETECTED,
        SubmissionState.AMBIGUOUS,
    }),
    SubmissionState.ERRORS_DETECTED: frozenset({
        SubmissionState.CORRECTING,
        SubmissionState.EXHAUSTED,
    }),
    SubmissionState.CORRECTING: frozenset({
        SubmissionState.SUBMITTING,
        SubmissionState.CANCELLED,
    }),
    SubmissionState.SUBMITTED: frozenset(),
    SubmissionState.AMBIGUOUS: frozenset(),
    SubmissionState.EXHAUSTED: frozenset(),
    SubmissionState.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in ALLOWED_TRANSITIONS.items() if not targets)


class InvalidTransitionError(FormPilotError):
    """Raised when the state machine is asked to make an illegal move."""
    pass


@dataclass
class RecoveryOutcome:
    state: SubmissionState
    attempts: int
    errors: List[ValidationError] = dataclass_field(default_factory=list)
    reason: str = ""

    @property
    def success(self) -> bool:
        return self.state == SubmissionState.SUBMITTED


class SubmissionStateMachine:
    """
    Submission/recovery loop over an explicit transition table.

    An attempt is counted each time SUBMITTING is entered, so with
    ``max_attempts`` attempts there are at most ``max_attempts - 1``
    correction rounds.
    """

    def __init__(self, fields: List[Field], cache: ResponseCache,
                 submitter: FormSubmitter, detector: ValidationErrorDetector,
                 filler: FieldFiller, provider: QuestionProvider,
                 channel: AnswerChannel, discovery: Optional[FieldDiscovery] = None,
                 max_attempts: Optional[int] = None):
        self.fields = list(fields)
        self.cache = cache
        self.submitter = submitter
        self.detector = detector
        self.filler = filler
        self.provider = provider
        self.channel = channel
        self.discovery = discovery
        self.max_attempts = Settings.MAX_SUBMIT_ATTEMPTS if max_attempts is None else max_attempts

        self.state = SubmissionState.IDLE
        self.attempts = 0
        self.errors: List[ValidationError] = []
        self.history: List[SubmissionState] = [self.state]

    def transition(self, target: SubmissionState):
        """Move to ``target`` if the table allows it."""
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"{self.state.value} -> {target.value} is not allowed")
        logger.debug(f"Submission state: {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)
        if target == SubmissionState.SUBMITTING:
            self.attempts += 1

    async def run(self) -> RecoveryOutcome:
        """
        Run the loop until a terminal state.

        Returns:
            RecoveryOutcome with the final state, attempts and last errors
        """
        logger.step(7, "Submitting form")

        while self.state not in TERMINAL_STATES:
            if self.state in (SubmissionState.IDLE, SubmissionState.CORRECTING):
                if self.state == SubmissionState.CORRECTING:
                    cancelled = await self._correct()
                    if cancelled:
                        self.transition(SubmissionState.CANCELLED)
                        break
                self.transition(SubmissionState.SUBMITTING)
                await self._submit_and_observe()
            elif self.state == SubmissionState.ERRORS_DETECTED:
                if self.attempts < self.max_attempts:
                    self.transition(SubmissionState.CORRECTING)
                else:
                    self.transition(SubmissionState.EXHAUSTED)

        return self._outcome()

    async def _submit_and_observe(self):
        logger.info(f"Submit attempt {self.attempts}/{self.max_attempts}")
        try:
            await self.submitter.submit()
        except SubmitError as e:
            logger.warning(f"Submit trigger failed: {e}")

        submitted = await self.submitter.observe_outcome()
        if submitted:
            self.errors = []
            self.transition(SubmissionState.SUBMITTED)
            return

        self.errors = await self.detector.detect()
        if not self.errors:
            self.transition(SubmissionState.AMBIGUOUS)
            return

        for error in self.errors:
            logger.warning(f"Validation error: {error}")
        self.transition(SubmissionState.ERRORS_DETECTED)

    async def _correct(self) -> bool:
        """
        One correction round over the current errors.

        Returns:
            True if the human cancelled
        """
        await self.channel.show(f"Found {len(self.errors)} issue(s) to fix:")
        for error in self.errors:
            await self.channel.show(f"  - {error.to_user_friendly_string()}")

        self.channel.set_total(len(self.errors))
        for error in self.errors:
            question = await self._correction_question(error)
            raw = await self.channel.prompt(question)
            if is_cancellation(raw):
                logger.info("Correction cancelled by user")
                return True

            value = sanitize_input(raw)
            if not value:
                logger.info(f"No correction given for {error.display_name}, skipping")
                continue

            field = await self._resolve_field(error)
            if field is None:
                logger.warning(f"No field matches error for {error.display_name}")
                continue

            normalized = validate_answer(field, value)
            if normalized.is_valid and normalized.value:
                value = normalized.value

            try:
                status = await self.filler.fill(field, value)
            except FormPilotError as e:
                logger.warning(f"Correction for {field.label} not applied: {e}")
                continue
            if status == FillStatus.FILLED:
                self.cache.set(field.identity, value, field.label)
                logger.success(f"Updated {field.label}")
        return False

    async def _correction_question(self, error: ValidationError) -> str:
        try:
            response = await self.provider.correction_ask(
                error.field_name, error.field_label, error.current_value, error.error_message
            )
        except Exception as e:
            # Question wording must never block recovery
            logger.warning(f"Correction question failed: {e}")
            response = None
        if response is None or not response.success or not response.question.strip():
            return correction_template(error.display_name, error.error_message)
        return response.question

    async def _resolve_field(self, error: ValidationError) -> Optional[Field]:
        """Known fields first, then custom widgets found by a fresh scan."""
        field = match_field(self.fields, error)
        if field is not None or self.discovery is None:
            return field

        try:
            rediscovered = await self.discovery.discover(custom_only=True)
        except DiscoveryError as e:
            logger.warning(f"Re-scan for custom widgets failed: {e}")
            return None
        field = match_field(rediscovered, error)
        if field is not None:
            self.fields.append(field)
        return field

    def _outcome(self) -> RecoveryOutcome:
        reasons = {
            SubmissionState.SUBMITTED: "Form submitted successfully",
            SubmissionState.AMBIGUOUS: "No validation errors detected, but submission could not be confirmed",
            SubmissionState.EXHAUSTED: f"Validation errors remain after {self.attempts} attempts",
            SubmissionState.CANCELLED: "Cancelled by user",
        }
        return RecoveryOutcome(
            state=self.state,
            attempts=self.attempts,
            errors=list(self.errors),
            reason=reasons.get(self.state, ""),
        )


def match_field(fields: List[Field], error: ValidationError) -> Optional[Field]:
    """Find the field an error refers to by identity, name, id or label."""
    name = error.field_name
    label = normalize_field_name(strip_required_marker(error.field_label or ''))

    for field in fields:
        if name and name == field.identity:
            return field
    for field in fields:
        if name and name in (field.name, field.element_id, field.test_id):
            return field
    for field in fields:
        if label and normalize_field_name(field.label) == label:
            return field
    return None
