"""
Answer model - Accepted human answers keyed by field identity.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime
from typing import Dict, Iterator, List, Optional


@dataclass(frozen=True)
class Answer:
    """A single accepted answer for one field."""

    field_identity: str
    value: str
    field_label: str = ""
    timestamp: datetime = dataclass_field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, str]:
        return {
            'field_identity': self.field_identity,
            'field_label': self.field_label,
            'value': self.value,
            'timestamp': self.timestamp.isoformat(),
        }


class ResponseCache:
    """
    Last accepted value per field identity.

    Owned by one form run: written during collection and correction,
    read during filling. Later writes overwrite earlier ones.
    """

    def __init__(self):
        self._answers: Dict[str, Answer] = {}

    def set(self, field_identity: str, value: str, field_label: str = "") -> Answer:
        answer = Answer(field_identity=field_identity, value=value, field_label=field_label)
        self._answers[field_identity] = answer
        return answer

    def get(self, field_identity: str) -> Optional[str]:
        answer = self._answers.get(field_identity)
        return answer.value if answer else None

    def get_answer(self, field_identity: str) -> Optional[Answer]:
        return self._answers.get(field_identity)

    def answers(self) -> List[Answer]:
        """Answers in insertion order."""
        return list(self._answers.values())

    def as_dict(self) -> Dict[str, str]:
        return {key: answer.value for key, answer in self._answers.items()}

    def clear(self):
        self._answers.clear()

    def __contains__(self, field_identity: object) -> bool:
        return field_identity in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __repr__(self) -> str:
        return f"ResponseCache({len(self._answers)} answers)"
