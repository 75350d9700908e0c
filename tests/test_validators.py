import pytest

from finetune_intake.errors import ValidationError
from finetune_intake.shared.validators import (
    filter_phone_input,
    names_match,
    require_text,
    validate_email,
    validate_phone,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("(555) 123-4567", "5551234567"),
        ("555.123.4567 ext 89", "5551234567"),
        ("555-12", "55512"),
        ("abc", ""),
        (None, ""),
    ],
)
def test_phone_input_keeps_first_ten_digits(raw, expected):
    assert filter_phone_input(raw) == expected


def test_phone_must_be_ten_digits():
    assert validate_phone("5551234567") == "5551234567"

    with pytest.raises(ValidationError) as exc:
        validate_phone("555123")
    assert exc.value.field == "phone"
    assert exc.value.message == "Phone number must be 10 digits"

    with pytest.raises(ValidationError) as exc:
        validate_phone("  ")
    assert exc.value.message == "Phone is required"


def test_email_is_trimmed_and_lowercased():
    assert validate_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"


def test_email_needs_at_sign():
    with pytest.raises(ValidationError) as exc:
        validate_email("jane.example.com")
    assert exc.value.field == "email"

    with pytest.raises(ValidationError) as exc:
        validate_email("")
    assert exc.value.message == "Email is required"


def test_require_text_uses_label():
    assert require_text("firstName", "  Jane ", "First name") == "Jane"
    with pytest.raises(ValidationError) as exc:
        require_text("firstName", " ", "First name")
    assert exc.value.message == "First name is required"


@pytest.mark.parametrize(
    "typed, expected, ok",
    [
        ("Jane Doe", "Jane Doe", True),
        ("  jane DOE  ", "Jane Doe", True),
        ("Jane", "Jane Doe", False),
        ("Jane  Doe", "Jane Doe", False),
        ("", "Jane Doe", False),
        ("Anyone", "", True),
        ("   ", "", False),
    ],
)
def test_names_match(typed, expected, ok):
    assert names_match(typed, expected) is ok
