"""
Field Classifier - Turn raw control descriptions into Field records.
Chooses the label, infers the type, decides required-ness and builds the
selectors used later to re-locate the live element.
"""

from typing import List, Dict, Any, Optional, Sequence

from ..models.field import Field, FieldType, normalize_field_name
from ..utils.dom_utils import css_attr
from ..utils.text_utils import humanize_name, clean_label, strip_required_marker


# Keyword → type, checked in order against the class attribute
CLASS_TYPE_KEYWORDS = [
    ('password', FieldType.PASSWORD),
    ('email', FieldType.EMAIL),
    ('phone', FieldType.TEL),
    ('tel', FieldType.TEL),
    ('number', FieldType.NUMBER),
    ('date', FieldType.DATE),
    ('url', FieldType.URL),
    ('search', FieldType.TEXT),
]

INPUT_MODE_TYPES = {
    'email': FieldType.EMAIL,
    'tel': FieldType.TEL,
    'numeric': FieldType.NUMBER,
    'decimal': FieldType.NUMBER,
    'url': FieldType.URL,
}

PLACEHOLDER_TYPE_KEYWORDS = [
    ('@', FieldType.EMAIL),
    ('email', FieldType.EMAIL),
    ('e-mail', FieldType.EMAIL),
    ('phone', FieldType.TEL),
    ('yyyy-mm-dd', FieldType.DATE),
    ('http', FieldType.URL),
    ('www.', FieldType.URL),
]

# Attribute types that never become fields
IGNORED_INPUT_TYPES = {'hidden', 'submit', 'button', 'reset', 'image'}

# Label candidate keys, in priority order
LABEL_SOURCES = ['aria', 'labelledBy', 'forLabel', 'enclosing', 'sibling', 'placeholder']
CHOICE_LABEL_SOURCES = ['aria', 'labelledBy', 'forLabel', 'enclosing', 'following', 'sibling']
OPTION_LABEL_SOURCES = ['aria', 'labelledBy', 'forLabel', 'enclosing', 'following']


class FieldClassifier:
    """Classifies raw control descriptions into Field objects."""

    @staticmethod
    def infer_type(raw: Dict[str, Any]) -> Optional[FieldType]:
        """
        Infer a control's FieldType.

        Order: tag and ARIA role, explicit type attribute, then keywords
        from the class attribute, input mode and placeholder.

        Args:
            raw: Control description produced by the in-page scan

        Returns:
            FieldType, or None when the control should be ignored
        """
        tag = raw.get('tag', 'input')
        role = raw.get('role', '')

        if tag == 'select' or raw.get('isCustom') or role in ('combobox', 'listbox'):
            return FieldType.SELECT
        if tag == 'textarea':
            return FieldType.TEXTAREA
        if tag != 'input':
            if role in ('textbox', 'searchbox'):
                return FieldType.TEXTAREA if raw.get('multiline') else FieldType.TEXT
            return None

        type_attr = raw.get('typeAttr', '')
        if type_attr:
            if type_attr in IGNORED_INPUT_TYPES:
                return None
            # Unknown type attributes render as text inputs in browsers
            return FieldType.from_attribute(type_attr) or FieldType.TEXT

        class_name = (raw.get('className') or '').lower()
        for keyword, field_type in CLASS_TYPE_KEYWORDS:
            if keyword in class_name:
                return field_type

        mode_type = INPUT_MODE_TYPES.get(raw.get('inputMode', ''))
        if mode_type:
            return mode_type

        placeholder = (raw.get('placeholder') or '').lower()
        for keyword, field_type in PLACEHOLDER_TYPE_KEYWORDS:
            if keyword in placeholder:
                return field_type

        return FieldType.TEXT

    @staticmethod
    def choose_label(raw: Dict[str, Any], field_type: Optional[FieldType] = None) -> str:
        """
        Pick the human-readable label for a control.

        Grouped radio/checkbox inputs use the group label; single controls
        walk the label candidates, then fall back to humanized name or id,
        then a generic label for the type.

        Args:
            raw: Control description (label candidates under ``labels``)
            field_type: Inferred type, used for the generic fallback

        Returns:
            Label text (may still carry a required marker)
        """
        labels = raw.get('labels') or {}
        type_attr = raw.get('typeAttr', '')

        if type_attr in ('radio', 'checkbox') and raw.get('groupSize', 1) > 1:
            group_label = clean_label(raw.get('groupLabel', ''))
            if group_label:
                return group_label
            return humanize_name(raw.get('name', '')) or (field_type or FieldType.RADIO).generic_label()

        sources = CHOICE_LABEL_SOURCES if type_attr in ('radio', 'checkbox') else LABEL_SOURCES
        for source in sources:
            text = clean_label(labels.get(source, ''))
            if text:
                return text

        for attribute in ('name', 'id'):
            text = humanize_name(raw.get(attribute, ''))
            if text:
                return text

        return (field_type or FieldType.TEXT).generic_label()

    @staticmethod
    def option_label(raw: Dict[str, Any]) -> str:
        """Visible text of one member of a radio/checkbox group."""
        labels = raw.get('labels') or {}
        for source in OPTION_LABEL_SOURCES:
            text = clean_label(labels.get(source, ''))
            if text:
                return text
        return raw.get('value') or humanize_name(raw.get('id', ''))

    @staticmethod
    def is_required(raw: Dict[str, Any], label: str) -> bool:
        """Required attribute, aria-required, or a '*' in the label."""
        return bool(raw.get('required') or raw.get('ariaRequired') or '*' in (label or ''))

    @staticmethod
    def answer_key(raw: Dict[str, Any], label: str, group: bool = False) -> str:
        """
        Cache key for a control.

        Name, id and test id qualify only when they matched exactly one
        element at scan time. A group owns its shared name. Otherwise the
        normalized label is used and made unique by discovery.
        """
        name = raw.get('name')
        if name and (group or raw.get('nameCount') == 1):
            return name
        if raw.get('id') and raw.get('idCount') == 1:
            return raw['id']
        if raw.get('testId') and raw.get('testIdCount') == 1:
            return raw['testId']
        return normalize_field_name(label) or 'field'

    @staticmethod
    def build_selectors(raw: Dict[str, Any], group: bool = False) -> List[str]:
        """
        Build selectors in priority order: name, id, test id, positional.

        Attribute selectors are kept only when they matched exactly one
        element at scan time (or, for groups, only the group's members).
        The positional path is always last.

        Args:
            raw: Control description
            group: True when building the selector for a collapsed group

        Returns:
            Non-empty list of selector strings
        """
        tag = raw.get('tag', 'input')
        selectors = []

        name = raw.get('name')
        if name:
            if group:
                selectors.append(f'{tag}[type="{raw.get("typeAttr")}"]{css_attr("name", name)}')
            elif raw.get('nameCount') == 1:
                selectors.append(f'{tag}{css_attr("name", name)}')

        if not group:
            if raw.get('id') and raw.get('idCount') == 1:
                selectors.append(f'{tag}{css_attr("id", raw["id"])}')
            if raw.get('testId') and raw.get('testIdCount') == 1:
                selectors.append(css_attr(raw.get('testIdAttr') or 'data-testid', raw['testId']))

        if raw.get('path'):
            selectors.append(raw['path'])
        return selectors

    @staticmethod
    def to_field(raw: Dict[str, Any]) -> Optional[Field]:
        """Build a Field from one control description, None if ignored."""
        field_type = FieldClassifier.infer_type(raw)
        if field_type is None:
            return None

        raw_label = FieldClassifier.choose_label(raw, field_type)
        selectors = FieldClassifier.build_selectors(raw)
        options, option_values = FieldClassifier._select_options(raw)
        label = strip_required_marker(raw_label) or field_type.generic_label()

        return Field(
            label=label,
            selector=selectors[0],
            field_type=field_type,
            required=FieldClassifier.is_required(raw, raw_label),
            alternate_selectors=tuple(selectors[1:]),
            tag_name=raw.get('tag', 'input'),
            name=raw.get('name') or None,
            element_id=raw.get('id') or None,
            test_id=raw.get('testId') or None,
            placeholder=raw.get('placeholder') or None,
            min_value=raw.get('min') or None,
            max_value=raw.get('max') or None,
            min_length=raw.get('minLength'),
            max_length=raw.get('maxLength'),
            options=options,
            option_values=option_values,
            is_custom=bool(raw.get('isCustom')),
            key=FieldClassifier.answer_key(raw, label),
        )

    @staticmethod
    def to_group_field(members: Sequence[Dict[str, Any]]) -> Field:
        """Collapse same-named radio/checkbox inputs into one option field."""
        first = members[0]
        field_type = FieldType.RADIO if first.get('typeAttr') == 'radio' else FieldType.CHECKBOX
        raw_label = FieldClassifier.choose_label(first, field_type)
        selectors = FieldClassifier.build_selectors(first, group=True)
        label = strip_required_marker(raw_label) or field_type.generic_label()

        return Field(
            label=label,
            selector=selectors[0],
            field_type=field_type,
            required=any(FieldClassifier.is_required(m, raw_label) for m in members),
            alternate_selectors=tuple(selectors[1:]),
            tag_name='input',
            name=first.get('name') or None,
            options=tuple(FieldClassifier.option_label(m) for m in members),
            option_values=tuple(m.get('value', '') for m in members),
            is_group=True,
            key=FieldClassifier.answer_key(first, label, group=True),
        )

    @staticmethod
    def _select_options(raw: Dict[str, Any]):
        """Native select options: non-empty texts, placeholder entries dropped."""
        entries = [
            entry for entry in raw.get('options') or []
            if (entry.get('text') or '').strip() and entry.get('value', '') != ''
        ]
        if not entries:
            return None, None
        return (
            tuple(entry['text'].strip() for entry in entries),
            tuple(entry.get('value', '') for entry in entries),
        )
