"""Data models for Form Pilot."""

from .field import Field, FieldType, normalize_field_name
from .answer import Answer, ResponseCache
from .validation_error import ValidationError
from .submission import Submission, SubmissionResult

__all__ = [
    'Field', 'FieldType', 'normalize_field_name',
    'Answer', 'ResponseCache',
    'ValidationError',
    'Submission', 'SubmissionResult',
]
