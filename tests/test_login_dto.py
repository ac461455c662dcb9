"""Executable examples of LoginRequest validation."""
import pytest

from app.core.validation import ValidationFailed, validate_payload
from app.schemas.auth import LoginRequest


VALID_PASSWORD = "SecurePassword123!"


def errors_for(payload: dict) -> list:
    """Validation errors for ``payload``; empty when it is accepted."""
    try:
        validate_payload(LoginRequest, payload)
    except ValidationFailed as exc:
        return exc.errors
    return []


def field_errors(errors: list, field: str) -> list:
    return [e for e in errors if e["field"] == field]


class TestEmail:

    def test_accepts_valid_email(self):
        assert field_errors(errors_for({"email": "user@example.com", "password": VALID_PASSWORD}), "email") == []

    def test_rejects_invalid_format(self):
        errors = field_errors(errors_for({"email": "invalid-email", "password": VALID_PASSWORD}), "email")
        assert len(errors) == 1
        assert "valid email address" in errors[0]["message"]
        assert errors[0]["code"] == "invalid_email"

    def test_rejects_empty_email(self):
        errors = field_errors(errors_for({"email": "", "password": VALID_PASSWORD}), "email")
        assert len(errors) == 1
        assert errors[0]["code"] == "not_empty"

    def test_strips_embedded_markup(self):
        request = validate_payload(
            LoginRequest,
            {"email": "<script>alert('xss')</script>test@example.com", "password": VALID_PASSWORD},
        )
        assert request.email == "test@example.com"

    def test_trims_whitespace(self):
        request = validate_payload(
            LoginRequest, {"email": "  test@example.com  ", "password": VALID_PASSWORD}
        )
        assert request.email == "test@example.com"

    def test_markup_only_email_is_empty(self):
        errors = field_errors(errors_for({"email": "<b></b>", "password": VALID_PASSWORD}), "email")
        assert [e["code"] for e in errors] == ["not_empty"]


class TestPassword:

    def test_accepts_valid_password(self):
        assert errors_for({"email": "user@example.com", "password": VALID_PASSWORD}) == []

    def test_rejects_short_password(self):
        errors = field_errors(errors_for({"email": "user@example.com", "password": "short"}), "password")
        assert len(errors) == 1
        assert "at least 8 characters" in errors[0]["message"]

    @pytest.mark.parametrize("password", ["a", "1234567", "seven77"])
    def test_rejects_every_length_below_eight(self, password):
        errors = field_errors(errors_for({"email": "user@example.com", "password": password}), "password")
        assert [e["code"] for e in errors] == ["string_too_short"]

    def test_rejects_empty_password(self):
        errors = field_errors(errors_for({"email": "user@example.com", "password": ""}), "password")
        assert len(errors) == 1
        assert errors[0]["code"] == "not_empty"

    def test_accepts_exactly_eight_characters(self):
        assert errors_for({"email": "user@example.com", "password": "12345678"}) == []


class TestWholeRequest:

    def test_all_valid(self):
        request = validate_payload(LoginRequest, {"email": "user@example.com", "password": VALID_PASSWORD})
        assert request.email == "user@example.com"
        assert request.password == VALID_PASSWORD

    def test_all_invalid_reports_every_field(self):
        errors = errors_for({"email": "invalid-email", "password": "short"})
        assert field_errors(errors, "email")
        assert field_errors(errors, "password")

    def test_missing_fields_reported(self):
        errors = errors_for({})
        assert {e["field"] for e in errors} == {"email", "password"}
        assert all(e["code"] == "missing" for e in errors)

    def test_non_object_body(self):
        errors = errors_for(None)
        assert len(errors) == 1
        assert errors[0]["field"] == ""
