from datetime import date

import pytest
from pydantic import ValidationError

from app.schemas.form_schema import FormField
from app.utils.field_library import create_field_from_template, get_field_template
from app.utils.validators import (
    ApplicationValidator,
    is_empty,
    validate_custom_field,
    validate_custom_fields,
    validate_standard_field,
    validate_standard_fields,
)

TODAY = date(2026, 3, 1)


@pytest.mark.parametrize("value, expected", [
    ("2016", True),
    ("2036", True),
    ("2015", False),
    ("2037", False),
    (2026, True),
    ("next year", False),
    (None, False),
])
def test_graduation_year_window(value, expected):
    ok, _ = ApplicationValidator.validate_graduation_year(value, TODAY)
    assert ok is expected


@pytest.mark.parametrize("value, expected", [
    ("0", True),
    ("0.0", True),
    ("4.0", True),
    ("3.85", True),
    ("4.01", False),
    ("-0.1", False),
    ("7", False),
    ("abc", False),
    ("nan", False),
    ("inf", False),
])
def test_gpa_bounds(value, expected):
    ok, _ = ApplicationValidator.validate_gpa(value)
    assert ok is expected


@pytest.mark.parametrize("phone, expected", [
    ("+1 (541) 555-0142", True),
    ("5415550142", True),
    ("0541555014", False),
    ("555-CALL-NOW", False),
    ("", False),
])
def test_phone_format(phone, expected):
    assert ApplicationValidator.is_valid_phone(phone) is expected


@pytest.mark.parametrize("email, expected", [
    ("jane@example.com", True),
    ("jane@example", False),
    ("jane doe@example.com", False),
    ("@example.com", False),
])
def test_email_format(email, expected):
    assert ApplicationValidator.is_valid_email(email) is expected


def test_is_empty():
    assert is_empty(None)
    assert is_empty("   ")
    assert is_empty([])
    assert is_empty(False)
    assert not is_empty(0)
    assert not is_empty("x")


# --- built-in fields ---

def test_standard_field_messages():
    assert validate_standard_field("first_name", "J") == "Must be at least 2 characters"
    assert validate_standard_field("email", "not-an-email") == "Valid email address is required"
    assert validate_standard_field("phone", "") == "Valid phone number is required"
    assert validate_standard_field("city", " ") == "This field is required"
    assert validate_standard_field("graduation_year", "2040", TODAY) == "Please enter a valid graduation year"
    assert validate_standard_field("gpa", "4.5") == "GPA must be between 0.0 and 4.0"
    assert validate_standard_field("career_goals", "Too short") == "Please provide at least 50 characters"
    assert validate_standard_field("financial_need", "x" * 24) == "Please provide at least 25 characters"


def test_standard_field_optional_values_pass():
    assert validate_standard_field("gpa", "") is None
    assert validate_standard_field("gpa", None) is None
    assert validate_standard_field("date_of_birth", "") is None
    assert validate_standard_field("work_experience", None) is None


def test_validate_standard_fields_collects_all(complete_form_data):
    data = dict(complete_form_data, first_name="", zip="")
    errors = validate_standard_fields(["first_name", "last_name", "zip"], data)
    assert errors == {"first_name": "Must be at least 2 characters", "zip": "This field is required"}


# --- schema-driven fields ---

def _field(**kwargs):
    kwargs.setdefault("id", "f1")
    kwargs.setdefault("label", "Question")
    return FormField.model_validate(kwargs)


def test_required_checked_before_type_rules():
    field = _field(type="number", required=True, validation={"min": 1})
    assert validate_custom_field(field, "") == "Question is required"
    assert validate_custom_field(_field(type="checkbox", required=True), False) == "Question is required"


def test_empty_optional_field_short_circuits():
    field = _field(type="email", validation={"pattern": "^x$"})
    assert validate_custom_field(field, "") is None
    assert validate_custom_field(field, None) is None


def test_text_length_and_pattern():
    field = _field(type="textarea", validation={"minLength": 5, "maxLength": 10, "pattern": "^[a-z ]+$"})
    assert validate_custom_field(field, "abc") == "Minimum 5 characters"
    assert validate_custom_field(field, "abcdefghijkl") == "Maximum 10 characters"
    assert validate_custom_field(field, "ABCDEF") == "Invalid format"
    assert validate_custom_field(field, "abc def") is None


def test_number_range():
    field = _field(type="number", validation={"min": 1, "max": 10})
    assert validate_custom_field(field, "eleven") == "Please enter a valid number"
    assert validate_custom_field(field, 0) == "Value must be at least 1"
    assert validate_custom_field(field, "11") == "Value must be at most 10"
    assert validate_custom_field(field, "10") is None


def test_number_rejects_non_finite_values():
    gpa = create_field_from_template(get_field_template("gpa"), "gpa")
    assert validate_custom_field(gpa, "nan") == "Please enter a valid number"
    assert validate_custom_field(gpa, float("inf")) == "Please enter a valid number"
    assert validate_custom_field(gpa, "4.01") == "Value must be at most 4"
    assert validate_custom_field(gpa, "3.2") is None


def test_select_field_requires_options():
    with pytest.raises(ValidationError):
        _field(type="select")
    with pytest.raises(ValidationError):
        _field(type="select", options=[])


def test_email_phone_date_select():
    assert validate_custom_field(_field(type="email"), "bad") == "Valid email address is required"
    assert validate_custom_field(_field(type="phone"), "abc") == "Valid phone number is required"
    assert validate_custom_field(_field(type="date"), "31/31/2020") == "Please enter a valid date"
    assert validate_custom_field(_field(type="date"), "2024-02-29") is None
    select = _field(type="select", options=["Red", "Green"])
    assert validate_custom_field(select, "Blue") == "Please select a valid option"
    assert validate_custom_field(select, "Green") is None


def test_file_size_and_format():
    field = _field(type="file", maxSize=1024 * 1024, acceptedFormats=[".pdf"])
    assert validate_custom_field(field, {"name": "essay.pdf", "size": 2 * 1024 * 1024}) == "File must be smaller than 1MB"
    assert validate_custom_field(field, {"name": "essay.docx", "size": 100}) == "Accepted formats: .pdf"
    assert validate_custom_field(field, {"name": "essay.PDF", "size": 100}) is None


def test_validate_custom_fields_keys_by_field_id():
    fields = [
        _field(id="a", label="A", type="text", required=True),
        _field(id="b", label="B", type="text"),
    ]
    assert validate_custom_fields(fields, {"b": "ok"}) == {"a": "A is required"}
