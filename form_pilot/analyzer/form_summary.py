"""
Form Summary - Overview of discovered fields shown before collection.
"""

from collections import Counter
from typing import List, Dict, Any

from ..models.field import Field, FieldType


TEXT_LIKE = {
    FieldType.TEXT, FieldType.TEXTAREA, FieldType.EMAIL,
    FieldType.TEL, FieldType.URL, FieldType.PASSWORD,
}


def calculate_complexity(fields: List[Field]) -> str:
    """Score fields and bucket into simple / moderate / complex."""
    score = 0
    for field in fields:
        score += 1
        if field.required:
            score += 1
        if field.field_type == FieldType.SELECT:
            score += 2
        elif field.field_type in (FieldType.CHECKBOX, FieldType.RADIO, FieldType.EMAIL, FieldType.TEL):
            score += 1

    if score <= 5:
        return 'simple'
    if score <= 15:
        return 'moderate'
    return 'complex'


def estimate_completion_seconds(fields: List[Field]) -> int:
    """Rough time a person needs to answer every question (minimum 30s)."""
    seconds = 0
    for field in fields:
        seconds += 10
        if field.field_type == FieldType.SELECT:
            seconds += 5
        elif field.field_type == FieldType.TEXTAREA:
            seconds += 20
        elif field.field_type in (FieldType.EMAIL, FieldType.TEL):
            seconds += 5
        if field.required:
            seconds += 3
    return max(seconds, 30)


def analyze_accessibility(fields: List[Field]) -> Dict[str, Any]:
    """
    Score how well the page labels its controls.

    Returns:
        Dictionary with score (0-100), issues and recommendations
    """
    issues = []
    recommendations = []
    score = 100

    unlabeled = [f for f in fields if f.label == f.field_type.generic_label()]
    if unlabeled:
        issues.append(f"{len(unlabeled)} fields missing labels")
        score -= len(unlabeled) * 10
        recommendations.append("Add descriptive labels to all form fields")

    text_fields = [f for f in fields if f.field_type in TEXT_LIKE]
    without_placeholder = [f for f in text_fields if not f.placeholder]
    if text_fields and len(without_placeholder) > len(fields) * 0.5:
        issues.append("Many fields lack helpful placeholder text")
        score -= 10
        recommendations.append("Add placeholder text to guide users")

    return {
        'score': max(score, 0),
        'issues': issues,
        'recommendations': recommendations,
    }


def summarize_fields(fields: List[Field]) -> Dict[str, Any]:
    """
    Summarize discovered fields.

    Args:
        fields: Discovered fields

    Returns:
        Dictionary with totals, per-type counts, complexity, estimated
        completion time and accessibility
    """
    required = sum(1 for f in fields if f.required)
    return {
        'total_fields': len(fields),
        'required_fields': required,
        'optional_fields': len(fields) - required,
        'field_types': dict(Counter(f.field_type.value for f in fields)),
        'fields_with_placeholders': sum(1 for f in fields if f.placeholder),
        'complexity': calculate_complexity(fields),
        'estimated_seconds': estimate_completion_seconds(fields),
        'accessibility': analyze_accessibility(fields),
    }


def format_summary(summary: Dict[str, Any]) -> str:
    """Multi-line text for showing a summary to the human."""
    types = ", ".join(f"{name}({count})" for name, count in summary['field_types'].items())
    minutes = -(-summary['estimated_seconds'] // 60)
    lines = [
        "Form Summary:",
        f"   Total Fields: {summary['total_fields']}",
        f"   Required Fields: {summary['required_fields']}",
        f"   Optional Fields: {summary['optional_fields']}",
        f"   Field Types: {types}",
        f"   Estimated Time: {minutes} minute(s)",
        f"   Complexity: {summary['complexity']}",
    ]
    return "\n".join(lines)
