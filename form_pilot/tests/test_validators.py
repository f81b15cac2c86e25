"""
Tests for local answer validation.
"""

import pytest

from form_pilot.engine.validators import validate_answer, resolve_option
from form_pilot.models.field import Field, FieldType


def make_field(field_type=FieldType.TEXT, **kwargs):
    return Field(label=kwargs.pop('label', 'Value'), selector='#value', field_type=field_type, **kwargs)


@pytest.mark.parametrize("value,ok", [
    ("a@b.co", True),
    ("a@b", False),
    ("not-an-email", False),
])
def test_email(value, ok):
    assert validate_answer(make_field(FieldType.EMAIL), value).is_valid is ok


@pytest.mark.parametrize("value,ok", [
    ("2024-03-15", True),
    ("15-03-2024", False),
    ("2024-13-01", False),
    ("2023-02-29", False),
])
def test_date(value, ok):
    assert validate_answer(make_field(FieldType.DATE), value).is_valid is ok


def test_date_respects_min_and_max():
    field = make_field(FieldType.DATE, min_value="2024-01-01", max_value="2024-12-31")
    assert validate_answer(field, "2024-06-01").is_valid
    assert not validate_answer(field, "2023-12-31").is_valid
    assert not validate_answer(field, "2025-01-01").is_valid


def test_options_by_index_substring_and_rejection():
    options = ("Red", "Green", "Blue")
    assert resolve_option("2", options).value == "Green"
    assert resolve_option("blu", options).value == "Blue"
    assert resolve_option("RED", options).value == "Red"

    rejected = resolve_option("Purple", options)
    assert not rejected.is_valid
    assert "1 to 3" in rejected.message
    for option in options:
        assert option in rejected.message


def test_out_of_range_index_is_rejected():
    assert not resolve_option("4", ("Red", "Green", "Blue")).is_valid


@pytest.mark.parametrize("value", ["²", "٣", "1²"])
def test_non_ascii_digits_are_not_indexes(value):
    field = make_field(FieldType.SELECT, options=("Red", "Green", "Blue"))
    result = validate_answer(field, value)

    assert not result.is_valid
    assert "1 to 3" in result.message


def test_select_field_goes_through_options():
    field = make_field(FieldType.SELECT, options=("Red", "Green", "Blue"))
    assert validate_answer(field, "3").value == "Blue"


def test_required_empty_is_rejected_and_optional_empty_accepted():
    assert not validate_answer(make_field(required=True), "   ").is_valid
    result = validate_answer(make_field(required=False), "")
    assert result.is_valid and result.value == ""


@pytest.mark.parametrize("value,ok", [
    ("+14155552671", True),
    ("(415) 555-2671", True),
    ("020 7946 0958", True),
    ("12", False),
    ("phone", False),
])
def test_phone(value, ok):
    assert validate_answer(make_field(FieldType.TEL), value).is_valid is ok


def test_number_bounds():
    field = make_field(FieldType.NUMBER, min_value="1", max_value="10")
    assert validate_answer(field, "5").is_valid
    assert not validate_answer(field, "0").is_valid
    assert not validate_answer(field, "11").is_valid
    assert not validate_answer(field, "five").is_valid


def test_time_month_week_datetime():
    assert validate_answer(make_field(FieldType.TIME), "23:59").is_valid
    assert not validate_answer(make_field(FieldType.TIME), "24:00").is_valid
    assert validate_answer(make_field(FieldType.MONTH), "2024-12").is_valid
    assert not validate_answer(make_field(FieldType.MONTH), "2024-13").is_valid
    assert validate_answer(make_field(FieldType.WEEK), "2024-W53").is_valid
    assert not validate_answer(make_field(FieldType.WEEK), "2024-W54").is_valid
    assert validate_answer(make_field(FieldType.DATETIME), "2024-03-15T09:30").is_valid
    assert not validate_answer(make_field(FieldType.DATETIME), "2024-03-15 09:30").is_valid


def test_color_normalizes_to_hex():
    assert validate_answer(make_field(FieldType.COLOR), "Red").value == "#ff0000"
    assert validate_answer(make_field(FieldType.COLOR), "#A1B2C3").value == "#a1b2c3"
    assert not validate_answer(make_field(FieldType.COLOR), "sparkly").is_valid


def test_url_gets_scheme():
    assert validate_answer(make_field(FieldType.URL), "example.com").value == "https://example.com"
    assert validate_answer(make_field(FieldType.URL), "http://localhost:8000").is_valid
    assert not validate_answer(make_field(FieldType.URL), "ftp://example.com").is_valid
    assert not validate_answer(make_field(FieldType.URL), "nohost").is_valid


def test_checkbox_tokens():
    field = make_field(FieldType.CHECKBOX)
    assert validate_answer(field, "Yes").value == "yes"
    assert validate_answer(field, "off").is_valid
    assert not validate_answer(field, "maybe").is_valid


def test_text_length_limits():
    field = make_field(min_length=3, max_length=5)
    assert validate_answer(field, "abcd").is_valid
    assert not validate_answer(field, "ab").is_valid
    assert not validate_answer(field, "abcdef").is_valid
