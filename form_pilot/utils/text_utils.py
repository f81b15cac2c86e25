"""
Text helpers shared by discovery, collection and recovery.
"""

import re

_UNSAFE_CHARS = re.compile('[^\x20-\x7E\u00A0-\uFFFF]')

TRUTHY_TOKENS = {'true', 'yes', 'y', '1', 'on', 'checked', 'selected'}
FALSY_TOKENS = {'false', 'no', 'n', '0', 'off', 'unchecked'}


def sanitize_input(text: str) -> str:
    """Trim, collapse whitespace and newlines, drop non-printable characters."""
    text = (text or '').strip()
    text = re.sub(r'[\r\n]+', ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return _UNSAFE_CHARS.sub('', text)


def humanize_name(name: str) -> str:
    """'first_name' / 'first-name' / 'firstName' → 'First Name'."""
    if not name:
        return ''
    text = re.sub(r'[-_]+', ' ', name)
    text = re.sub(r'(?<=[a-z0-9])(?=[A-Z])', ' ', text)
    text = re.sub(r'\s+', ' ', text).strip()
    return text.title()


def clean_label(text: str) -> str:
    """Collapse whitespace and drop a trailing colon."""
    text = re.sub(r'\s+', ' ', text or '').strip()
    return text.rstrip(':').strip()


def strip_required_marker(label: str) -> str:
    return clean_label(label.replace('*', ''))


def is_truthy(value: str) -> bool:
    return (value or '').strip().lower() in TRUTHY_TOKENS


def is_boolean_token(value: str) -> bool:
    token = (value or '').strip().lower()
    return token in TRUTHY_TOKENS or token in FALSY_TOKENS
