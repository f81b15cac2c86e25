"""
Local answer validation, one rule per field type.

Every rule returns a ValidationResult whose ``value`` is the normalized
answer to store (option text for choices, hex for colors, a full URL).
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence
from urllib.parse import urlparse

from ..models.field import Field, FieldType
from ..utils.text_utils import is_boolean_token


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Checked after stripping spaces, dashes, dots and parentheses
PHONE_PATTERNS = [
    re.compile(r'^\+[1-9]\d{6,14}$'),   # international, E.164 length
    re.compile(r'^00[1-9]\d{6,13}$'),   # international with 00 prefix
    re.compile(r'^0\d{9,10}$'),         # national with trunk prefix
    re.compile(r'^[1-9]\d{6,10}$'),     # local / NANP without prefix
]

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
DATETIME_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$')
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')
WEEK_PATTERN = re.compile(r'^(\d{4})-W(\d{2})$')
HEX_COLOR_PATTERN = re.compile(r'^#[0-9a-fA-F]{6}$')

NAMED_COLORS = {
    'black': '#000000',
    'white': '#ffffff',
    'red': '#ff0000',
    'green': '#008000',
    'blue': '#0000ff',
    'yellow': '#ffff00',
    'orange': '#ffa500',
    'purple': '#800080',
    'pink': '#ffc0cb',
    'brown': '#a52a2a',
    'gray': '#808080',
    'grey': '#808080',
    'cyan': '#00ffff',
    'magenta': '#ff00ff',
}


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    value: str = ""
    message: Optional[str] = None

    @classmethod
    def ok(cls, value: str) -> "ValidationResult":
        return cls(True, value)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(False, "", message)


def _to_float(text: Optional[str]) -> Optional[float]:
    if text is None or str(text).strip() == '':
        return None
    try:
        number = float(text)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _to_date(text: Optional[str]) -> Optional[date]:
    if not text or not DATE_PATTERN.match(text):
        return None
    try:
        return datetime.strptime(text, '%Y-%m-%d').date()
    except ValueError:
        return None


def validate_text(field: Field, value: str) -> ValidationResult:
    if field.min_length and len(value) < field.min_length:
        return ValidationResult.fail(f"Minimum length is {field.min_length} characters.")
    if field.max_length and field.max_length > 0 and len(value) > field.max_length:
        return ValidationResult.fail(f"Maximum length is {field.max_length} characters.")
    return ValidationResult.ok(value)


def validate_email(field: Field, value: str) -> ValidationResult:
    if not EMAIL_PATTERN.match(value):
        return ValidationResult.fail("Please provide a valid email address.")
    return validate_text(field, value)


def validate_phone(field: Field, value: str) -> ValidationResult:
    digits = re.sub(r'[\s\-().]', '', value)
    if not any(pattern.match(digits) for pattern in PHONE_PATTERNS):
        return ValidationResult.fail("Please provide a valid phone number.")
    return ValidationResult.ok(value)


def validate_number(field: Field, value: str) -> ValidationResult:
    number = _to_float(value)
    if number is None:
        return ValidationResult.fail("Please provide a valid number.")
    low, high = _to_float(field.min_value), _to_float(field.max_value)
    if low is not None and number < low:
        return ValidationResult.fail(f"Minimum value is {field.min_value}.")
    if high is not None and number > high:
        return ValidationResult.fail(f"Maximum value is {field.max_value}.")
    return ValidationResult.ok(value)


def validate_date(field: Field, value: str) -> ValidationResult:
    if not DATE_PATTERN.match(value):
        return ValidationResult.fail("Please use the format YYYY-MM-DD.")
    parsed = _to_date(value)
    if parsed is None:
        return ValidationResult.fail("That date does not exist on the calendar.")
    low, high = _to_date(field.min_value), _to_date(field.max_value)
    if low and parsed < low:
        return ValidationResult.fail(f"Date must be on or after {field.min_value}.")
    if high and parsed > high:
        return ValidationResult.fail(f"Date must be on or before {field.max_value}.")
    return ValidationResult.ok(value)


def validate_datetime(field: Field, value: str) -> ValidationResult:
    if not DATETIME_PATTERN.match(value):
        return ValidationResult.fail("Please use the format YYYY-MM-DDTHH:mm.")
    try:
        datetime.strptime(value, '%Y-%m-%dT%H:%M')
    except ValueError:
        return ValidationResult.fail("That date and time does not exist.")
    return ValidationResult.ok(value)


def validate_time(field: Field, value: str) -> ValidationResult:
    if not TIME_PATTERN.match(value):
        return ValidationResult.fail("Please use 24-hour time, HH:mm.")
    return ValidationResult.ok(value)


def validate_month(field: Field, value: str) -> ValidationResult:
    match = MONTH_PATTERN.match(value)
    if not match or not 1 <= int(match.group(2)) <= 12:
        return ValidationResult.fail("Please use the format YYYY-MM with a month from 01 to 12.")
    return ValidationResult.ok(value)


def validate_week(field: Field, value: str) -> ValidationResult:
    match = WEEK_PATTERN.match(value)
    if not match or not 1 <= int(match.group(2)) <= 53:
        return ValidationResult.fail("Please use the format YYYY-Www with a week from 01 to 53.")
    return ValidationResult.ok(value)


def validate_color(field: Field, value: str) -> ValidationResult:
    if HEX_COLOR_PATTERN.match(value):
        return ValidationResult.ok(value.lower())
    named = NAMED_COLORS.get(value.lower())
    if named:
        return ValidationResult.ok(named)
    return ValidationResult.fail(
        "Please provide a hex color like #1a2b3c or one of: "
        + ", ".join(sorted(set(NAMED_COLORS))) + "."
    )


def validate_url(field: Field, value: str) -> ValidationResult:
    candidate = value if re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*://', value) else f"https://{value}"
    parsed = urlparse(candidate)
    host = parsed.hostname or ''
    if parsed.scheme not in ('http', 'https') or not host or ' ' in candidate:
        return ValidationResult.fail("Please provide a valid http(s) URL.")
    if '.' not in host and host != 'localhost':
        return ValidationResult.fail("Please provide a valid http(s) URL.")
    return ValidationResult.ok(candidate)


def validate_boolean(field: Field, value: str) -> ValidationResult:
    if not is_boolean_token(value):
        return ValidationResult.fail("Please answer yes or no.")
    return ValidationResult.ok(value.strip().lower())


def resolve_option(value: str, options: Sequence[str]) -> ValidationResult:
    """
    Resolve an answer against a list of choices.

    A 1-based index wins, then an exact case-insensitive match, then the
    closest (shortest) option containing the answer as a substring.
    """
    if re.fullmatch(r'[0-9]+', value):
        index = int(value)
        if 1 <= index <= len(options):
            return ValidationResult.ok(options[index - 1])

    lowered = value.lower()
    for option in options:
        if option.lower() == lowered:
            return ValidationResult.ok(option)

    matches = [option for option in options if lowered and lowered in option.lower()]
    if matches:
        return ValidationResult.ok(min(matches, key=len))

    choices = ", ".join(options)
    return ValidationResult.fail(
        f"Please choose a number from 1 to {len(options)} or one of: {choices}."
    )


def validate_answer(field: Field, value: str) -> ValidationResult:
    """Run the required check and the type-specific rule for ``field``."""
    from .field_types import capability_for

    if not value.strip():
        if field.required:
            return ValidationResult.fail("This field is required. Please provide a value.")
        return ValidationResult.ok("")

    if field.is_option_bearing() and field.options:
        return resolve_option(value, field.options)

    return capability_for(field).validator(field, value)
