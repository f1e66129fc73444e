"""Tests for schema-driven form validation."""

import pytest

from twostep.forms.schemas import CODE_SCHEMA, EMAIL_SCHEMA, MOBILE_SCHEMA
from twostep.forms.validation import (
    FieldSchema,
    Schema,
    ValidationError,
    collect_errors,
    exact_length,
    matches,
    min_length,
    required,
    validate,
)


class TestRules:
    """Tests for the individual rule constructors."""

    def test_required_rejects_empty_only(self):
        rule = required("needed")
        assert rule.violated_by("")
        assert not rule.violated_by(" ")

    def test_pattern_rules_skip_empty(self):
        """Emptiness is reported by the required rule, not by other rules."""
        assert not matches(r"\d+", "digits").violated_by("")
        assert not min_length(3, "short").violated_by("")
        assert not exact_length(6, "len").violated_by("")

    def test_matches_whole_value(self):
        rule = matches(r"\d+", "digits")
        assert rule.violated_by("12a")
        assert not rule.violated_by("123")

    def test_min_and_exact_length(self):
        assert min_length(3, "short").violated_by("ab")
        assert not min_length(3, "short").violated_by("abc")
        assert exact_length(2, "len").violated_by("abc")
        assert not exact_length(2, "len").violated_by("ab")


class TestEmailSchema:
    """Tests for email login validation."""

    def test_valid_credentials(self):
        assert validate(EMAIL_SCHEMA, {"email": "a@b.com", "password": "x"}) == {}

    def test_bad_email_and_missing_password(self):
        """Both fields are reported, not just the first."""
        errors = validate(EMAIL_SCHEMA, {"email": "bad", "password": ""})
        assert errors == {
            "email": "Invalid email format",
            "password": "Password is required",
        }

    def test_missing_email(self):
        errors = validate(EMAIL_SCHEMA, {"email": "", "password": "x"})
        assert errors == {"email": "Email is required"}

    def test_missing_keys_count_as_empty(self):
        errors = validate(EMAIL_SCHEMA, {})
        assert set(errors) == {"email", "password"}

    @pytest.mark.parametrize(
        "address", ["user@example.com", "first.last+tag@sub.example.org", "a@b"]
    )
    def test_accepts_addresses(self, address):
        assert "email" not in validate(EMAIL_SCHEMA, {"email": address, "password": "x"})

    @pytest.mark.parametrize("address", ["bad", "a@", "@b.com", "a b@c.com", "a@-b.com"])
    def test_rejects_addresses(self, address):
        errors = validate(EMAIL_SCHEMA, {"email": address, "password": "x"})
        assert errors["email"] == "Invalid email format"


class TestMobileSchema:
    """Tests for mobile login validation."""

    def test_too_short(self):
        errors = validate(MOBILE_SCHEMA, {"mobile": "12345", "password": "x"})
        assert errors == {"mobile": "Mobile number must be at least 10 digits"}

    def test_ten_digits_pass(self):
        assert validate(MOBILE_SCHEMA, {"mobile": "1234567890", "password": "x"}) == {}

    def test_non_digits(self):
        errors = validate(MOBILE_SCHEMA, {"mobile": "+123456789012", "password": "x"})
        assert errors == {"mobile": "Mobile number must be digits only"}

    def test_missing_mobile(self):
        errors = validate(MOBILE_SCHEMA, {"mobile": "", "password": "x"})
        assert errors == {"mobile": "Mobile number is required"}

    def test_collect_errors_reports_every_violation(self):
        """collect_errors keeps all violations of a field."""
        errors = collect_errors(MOBILE_SCHEMA, {"mobile": "12a", "password": ""})
        codes = [(e.field, e.code) for e in errors]
        assert codes == [
            ("mobile", "PATTERN"),
            ("mobile", "MIN_LENGTH"),
            ("password", "REQUIRED"),
        ]
        assert errors[-1] == ValidationError(
            field="password", message="Password is required", code="REQUIRED"
        )


class TestCodeSchema:
    """Tests for one-time code validation."""

    def test_valid_code(self):
        assert validate(CODE_SCHEMA, {"code": "123456"}) == {}

    def test_missing_code(self):
        assert validate(CODE_SCHEMA, {"code": ""}) == {"code": "Code is required"}

    def test_wrong_length(self):
        assert validate(CODE_SCHEMA, {"code": "123"}) == {
            "code": "Code must be exactly 6 digits"
        }

    def test_non_numeric(self):
        assert validate(CODE_SCHEMA, {"code": "12a456"}) == {"code": "Code must be numeric"}


class TestSchema:
    """Tests for Schema helpers."""

    def test_payload_keeps_only_schema_fields(self):
        payload = EMAIL_SCHEMA.payload({"email": "a@b.com", "password": "x", "extra": "y"})
        assert payload == {"email": "a@b.com", "password": "x"}

    def test_validate_is_pure(self):
        """Validation does not modify its input."""
        values = {"email": "bad", "password": ""}
        validate(EMAIL_SCHEMA, values)
        assert values == {"email": "bad", "password": ""}

    def test_custom_schema(self):
        schema = Schema("pin", (FieldSchema("pin", (required("Pin is required"),)),))
        assert validate(schema, {"pin": None}) == {"pin": "Pin is required"}
        assert validate(schema, {"pin": 1234}) == {}
