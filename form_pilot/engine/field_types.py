"""
Capability table keyed by FieldType.

Each entry names where the field's options come from, which fill
strategy applies and which local validation rule checks answers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict

from ..models.field import Field, FieldType
from . import validators as v


class OptionSource(str, Enum):
    NONE = "none"
    STATIC = "static"        # read at discovery (native select, grouped inputs)
    WIDGET = "widget"        # read by opening a custom dropdown


class FillStrategy(str, Enum):
    TYPE_TEXT = "type_text"
    SET_VALUE = "set_value"
    SELECT_NATIVE = "select_native"
    SELECT_CUSTOM = "select_custom"
    TOGGLE = "toggle"
    CHOOSE_MEMBER = "choose_member"
    SKIP = "skip"


@dataclass(frozen=True)
class FieldCapability:
    option_source: OptionSource
    fill_strategy: FillStrategy
    validator: Callable[[Field, str], v.ValidationResult]


CAPABILITIES: Dict[FieldType, FieldCapability] = {
    FieldType.TEXT: FieldCapability(OptionSource.NONE, FillStrategy.TYPE_TEXT, v.validate_text),
    FieldType.PASSWORD: FieldCapability(OptionSource.NONE, FillStrategy.TYPE_TEXT, v.validate_text),
    FieldType.TEXTAREA: FieldCapability(OptionSource.NONE, FillStrategy.TYPE_TEXT, v.validate_text),
    FieldType.EMAIL: FieldCapability(OptionSource.NONE, FillStrategy.TYPE_TEXT, v.validate_email),
    FieldType.TEL: FieldCapability(OptionSource.NONE, FillStrategy.TYPE_TEXT, v.validate_phone),
    FieldType.URL: FieldCapability(OptionSource.NONE, FillStrategy.TYPE_TEXT, v.validate_url),
    FieldType.NUMBER: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_number),
    FieldType.RANGE: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_number),
    FieldType.DATE: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_date),
    FieldType.DATETIME: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_datetime),
    FieldType.TIME: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_time),
    FieldType.MONTH: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_month),
    FieldType.WEEK: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_week),
    FieldType.COLOR: FieldCapability(OptionSource.NONE, FillStrategy.SET_VALUE, v.validate_color),
    FieldType.SELECT: FieldCapability(OptionSource.STATIC, FillStrategy.SELECT_NATIVE, v.validate_text),
    FieldType.CHECKBOX: FieldCapability(OptionSource.NONE, FillStrategy.TOGGLE, v.validate_boolean),
    FieldType.RADIO: FieldCapability(OptionSource.NONE, FillStrategy.TOGGLE, v.validate_boolean),
    FieldType.FILE: FieldCapability(OptionSource.NONE, FillStrategy.SKIP, v.validate_text),
    FieldType.HIDDEN: FieldCapability(OptionSource.NONE, FillStrategy.SKIP, v.validate_text),
}

_CUSTOM_SELECT = FieldCapability(OptionSource.WIDGET, FillStrategy.SELECT_CUSTOM, v.validate_text)
_GROUP = FieldCapability(OptionSource.STATIC, FillStrategy.CHOOSE_MEMBER, v.validate_text)


def capability_for(field: Field) -> FieldCapability:
    """Capability for a field, accounting for custom widgets and groups."""
    if field.field_type == FieldType.SELECT and field.is_custom:
        return _CUSTOM_SELECT
    if field.is_group:
        return _GROUP
    return CAPABILITIES[field.field_type]
