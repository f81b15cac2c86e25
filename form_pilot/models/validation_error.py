"""
ValidationError model - A field-level error reported by the target site.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Tuple


@dataclass
class ValidationError:
    """One field-level validation failure from a single submit attempt."""

    field_name: str
    field_label: str
    error_message: str
    field_type: str = "unknown"
    current_value: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        """Deduplication key within one detection pass."""
        return (self.field_name, self.field_label)

    @property
    def display_name(self) -> str:
        return self.field_label or self.field_name

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_user_friendly_string(self) -> str:
        return f'There\'s an issue with "{self.display_name}": {self.error_message}'

    def __str__(self) -> str:
        return (
            f'Field "{self.field_label}" ({self.field_name}): {self.error_message}. '
            f'Current value: "{self.current_value}"'
        )
