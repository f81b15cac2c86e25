"""Collection, filling and submission engine for Form Pilot."""

from .validators import ValidationResult, validate_answer, resolve_option
from .field_types import CAPABILITIES, FillStrategy, OptionSource, capability_for
from .collector import ResponseCollector
from .filler import FieldFiller, FillStatus, FillReport
from .submitter import FormSubmitter
from .recovery import SubmissionStateMachine, SubmissionState, RecoveryOutcome
from .form_runner import FormRunner, FormRunResult, RunStatus

__all__ = [
    'ValidationResult', 'validate_answer', 'resolve_option',
    'CAPABILITIES', 'FillStrategy', 'OptionSource', 'capability_for',
    'ResponseCollector',
    'FieldFiller', 'FillStatus', 'FillReport',
    'FormSubmitter',
    'SubmissionStateMachine', 'SubmissionState', 'RecoveryOutcome',
    'FormRunner', 'FormRunResult', 'RunStatus',
]
