"""
Submission model - Answers sent to a form and the outcome of sending them.
"""

from dataclasses import dataclass, asdict, replace, field as dataclass_field
from datetime import datetime
from typing import List, Dict, Any, Optional
import json

from .answer import Answer
from .validation_error import ValidationError


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome attached to a submission after the last attempt."""

    success: bool
    status: str
    message: str = ""
    url: Optional[str] = None
    attempts: int = 0
    errors: List[ValidationError] = dataclass_field(default_factory=list)
    timestamp: datetime = dataclass_field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['errors'] = [e.to_dict() for e in self.errors]
        data['timestamp'] = self.timestamp.isoformat()
        return data


@dataclass(frozen=True)
class Submission:
    """Answers for one form URL, optionally with a result."""

    answers: List[Answer]
    url: str
    submission_time: datetime = dataclass_field(default_factory=datetime.now)
    result: Optional[SubmissionResult] = None

    @property
    def success(self) -> bool:
        return bool(self.result and self.result.success)

    def with_result(self, result: SubmissionResult) -> "Submission":
        return replace(self, result=result)

    def to_summary(self) -> Dict[str, str]:
        """Label → value, for display."""
        return {
            (answer.field_label or answer.field_identity): answer.value
            for answer in self.answers
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'submission_time': self.submission_time.isoformat(),
            'answers': [a.to_dict() for a in self.answers],
            'result': self.result.to_dict() if self.result else None,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def save_to_file(self, filepath: str):
        """Save submission to JSON file."""
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(self.to_json())

    def summary(self) -> str:
        """Get a human-readable summary."""
        lines = [
            "Submission Summary",
            "=" * 50,
            f"URL: {self.url}",
        ]
        if self.result:
            lines.append(f"Status: {self.result.status}")
            lines.append(f"Attempts: {self.result.attempts}")
            if self.result.message:
                lines.append(f"Message: {self.result.message}")
        for label, value in self.to_summary().items():
            lines.append(f"  {label.replace('*', '').strip()}: {value}")
        lines.append("=" * 50)
        return "\n".join(lines) + "\n"
