"""
Field model - Discovered form control descriptor.
Represents a single fillable control (or a collapsed radio/checkbox group).
"""

import re
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class FieldType(str, Enum):
    """Closed set of control types the engine knows how to handle."""

    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime-local"
    TIME = "time"
    MONTH = "month"
    WEEK = "week"
    COLOR = "color"
    RANGE = "range"
    URL = "url"
    PASSWORD = "password"
    FILE = "file"
    HIDDEN = "hidden"

    @classmethod
    def from_attribute(cls, value: Optional[str]) -> Optional["FieldType"]:
        """Map an HTML type attribute to a FieldType, None if unknown."""
        if not value:
            return None
        value = value.strip().lower()
        if value == "datetime":
            return cls.DATETIME
        if value == "search":
            return cls.TEXT
        try:
            return cls(value)
        except ValueError:
            return None

    def generic_label(self) -> str:
        """Label used when nothing on the page names the control."""
        names = {
            FieldType.TEL: "Phone",
            FieldType.DATETIME: "Date and Time",
            FieldType.URL: "URL",
            FieldType.SELECT: "Dropdown",
        }
        return f"{names.get(self, self.value.title())} Field"


def normalize_field_name(label: str) -> str:
    """Lowercase, whitespace → underscore, drop everything else non-word."""
    name = label.strip().lower()
    name = re.sub(r'\s+', '_', name)
    name = re.sub(r'[^a-z0-9_]', '', name)
    name = re.sub(r'_{2,}', '_', name)
    return name.strip('_')


@dataclass(frozen=True)
class Field:
    """Normalized field schema (discovery output)."""

    label: str
    selector: str
    field_type: FieldType
    required: bool = False

    # Fallback ways to re-locate the live element
    alternate_selectors: Tuple[str, ...] = ()

    # Identifiers
    tag_name: str = "input"
    name: Optional[str] = None
    element_id: Optional[str] = None
    test_id: Optional[str] = None

    # Hints and constraints
    placeholder: Optional[str] = None
    min_value: Optional[str] = None      # raw attribute, interpreted per type
    max_value: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    # Choices: visible texts and the matching value attributes
    options: Optional[Tuple[str, ...]] = None
    option_values: Optional[Tuple[str, ...]] = None

    # Widget shape
    is_custom: bool = False              # ARIA / third-party dropdown
    is_group: bool = False               # collapsed radio/checkbox group

    # Response cache key, unique within one discovery pass
    key: Optional[str] = None

    @property
    def identity(self) -> str:
        """
        Response cache key.

        Discovery assigns ``key``. Fields built without one use the first
        identifying attribute, then the selector, which is unique per control.
        """
        for candidate in (self.key, self.name, self.test_id, self.element_id):
            if candidate:
                return candidate
        return self.selector

    @property
    def all_selectors(self) -> Tuple[str, ...]:
        """Primary selector followed by the alternates, without repeats."""
        seen = []
        for selector in (self.selector,) + tuple(self.alternate_selectors):
            if selector and selector not in seen:
                seen.append(selector)
        return tuple(seen)

    def has_options(self) -> bool:
        return bool(self.options)

    def is_option_bearing(self) -> bool:
        """True for selects and collapsed radio/checkbox groups."""
        return self.field_type == FieldType.SELECT or self.is_group

    def is_fillable(self) -> bool:
        return self.field_type not in (FieldType.FILE, FieldType.HIDDEN)

    def with_selector(self, selector: str) -> "Field":
        """Re-resolved copy; the old primary becomes an alternate."""
        alternates = tuple(s for s in self.all_selectors if s != selector)
        return replace(self, selector=selector, alternate_selectors=alternates)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data['field_type'] = self.field_type.value
        data['identity'] = self.identity
        return data

    def __repr__(self) -> str:
        return f"Field({self.field_type.value} - {self.label} @ {self.selector})"
