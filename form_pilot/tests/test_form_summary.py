"""
Tests for the pre-collection form summary.
"""

from form_pilot.analyzer.form_summary import summarize_fields, format_summary
from form_pilot.models.field import Field, FieldType


def test_summary_counts_and_scores():
    fields = [
        Field('Email', '#email', FieldType.EMAIL, required=True),
        Field(FieldType.SELECT.generic_label(), 'select', FieldType.SELECT),
    ]
    summary = summarize_fields(fields)

    assert summary['total_fields'] == 2
    assert summary['required_fields'] == 1
    assert summary['field_types'] == {'email': 1, 'select': 1}
    assert summary['complexity'] == 'moderate'
    assert summary['estimated_seconds'] == 33
    assert summary['accessibility']['score'] == 90
    assert summary['accessibility']['issues'] == ["1 fields missing labels"]

    text = format_summary(summary)
    assert "Field Types: email(1), select(1)" in text
    assert "Estimated Time: 1 minute(s)" in text


def test_small_form_is_simple_with_minimum_time():
    summary = summarize_fields([Field('Name', '#n', FieldType.TEXT, placeholder='Ada')])
    assert summary['complexity'] == 'simple'
    assert summary['estimated_seconds'] == 30
    assert summary['accessibility']['score'] == 100
