"""Reusable annotated field types for request schemas.

A field type is an ordered list of transforms (one ``BeforeValidator``) followed
by an ordered list of checks (``AfterValidator``s). The first failing check
reports the single error for that field.
"""
import re
from typing import Annotated, Any, Callable, List, Optional

import nh3
from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BeforeValidator, ValidationInfo
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError


BLOCKED_EMAIL_DOMAINS = (
    "tempmail.org",
    "10minutemail.com",
    "guerrillamail.com",
    "mailinator.com",
)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
DOMAIN_PATTERN = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
PASSWORD_SPECIAL = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>?]")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


# Transforms

def sanitize_markup(value: Any) -> Any:
    """Strip every HTML tag; script/style bodies are dropped with their tags."""
    if isinstance(value, str):
        return nh3.clean(value, tags=set(), attributes={})
    return value


def trim(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def transforms(*steps: Callable[[Any], Any]) -> BeforeValidator:
    def apply(value: Any) -> Any:
        for step in steps:
            value = step(value)
        return value
    return BeforeValidator(apply)


# Checks

def _not_empty(value: str, info: ValidationInfo) -> str:
    if not value:
        raise PydanticCustomError(
            "not_empty",
            "{field} should not be empty",
            {"field": to_camel(info.field_name) if info.field_name else "value"},
        )
    return value


not_empty = AfterValidator(_not_empty)


def min_length(limit: int, message: Optional[str] = None) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) < limit:
            raise PydanticCustomError(
                "string_too_short",
                message or "Should have at least {min_length} characters",
                {"min_length": limit},
            )
        return value
    return AfterValidator(check)


def max_length(limit: int, message: Optional[str] = None) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) > limit:
            raise PydanticCustomError(
                "string_too_long",
                message or "Should have at most {max_length} characters",
                {"max_length": limit},
            )
        return value
    return AfterValidator(check)


def _is_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("invalid_email", "Please provide a valid email address")
    return value


is_email = AfterValidator(_is_email)


def domain_matches(domain: str, pattern: str) -> bool:
    domain, pattern = domain.lower(), pattern.lower()
    if pattern.startswith("*."):
        return domain.endswith(pattern[2:])
    return domain == pattern


def _allowed_email_domain(value: str) -> str:
    domain = value.rsplit("@", 1)[-1]
    if any(domain_matches(domain, blocked) for blocked in BLOCKED_EMAIL_DOMAINS):
        raise PydanticCustomError(
            "blocked_email_domain", "Temporary email addresses are not allowed"
        )
    return value


allowed_email_domain = AfterValidator(_allowed_email_domain)


def _is_slug(value: str) -> str:
    if not SLUG_PATTERN.match(value):
        raise PydanticCustomError(
            "invalid_slug",
            "Slug must contain only lowercase letters, numbers, and hyphens",
        )
    return value


is_slug = AfterValidator(_is_slug)


def is_valid_domain(domain: str) -> bool:
    if not domain or len(domain) > 253:
        return False
    if not DOMAIN_PATTERN.match(domain):
        return False
    parts = domain.split(".")
    if len(parts) < 2:
        return False
    return all(0 < len(part) <= 63 for part in parts)


def _is_domain(value: str) -> str:
    if not is_valid_domain(value):
        raise PydanticCustomError("invalid_domain", "Please provide a valid company domain")
    return value


is_domain = AfterValidator(_is_domain)


def _is_phone_number(value: str) -> str:
    """Accept E.164 with optional separators; keep only the canonical `+digits` form."""
    cleaned = re.sub(r"[^\d+]", "", value)
    digits = cleaned[1:]
    if not cleaned.startswith("+") or not 7 <= len(digits) <= 15 or not digits.isdigit():
        raise PydanticCustomError(
            "invalid_phone_number",
            "Phone number must be in international format (e.g., +1234567890)",
        )
    return cleaned


is_phone_number = AfterValidator(_is_phone_number)


def password_problems(password: str) -> List[str]:
    """Every unmet password rule, in a stable order."""
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        problems.append("Password must contain at least one number")
    if not PASSWORD_SPECIAL.search(password):
        problems.append("Password must contain at least one special character")
    if len(password) > PASSWORD_MAX_LENGTH:
        problems.append(f"Password must not exceed {PASSWORD_MAX_LENGTH} characters")
    return problems


def _strong_password(value: str) -> str:
    problems = password_problems(value)
    if problems:
        raise PydanticCustomError(
            "password_strength", "{problems}", {"problems": ", ".join(problems)}
        )
    return value


strong_password = AfterValidator(_strong_password)


# Field types

EmailField = Annotated[str, transforms(sanitize_markup, trim), not_empty, is_email]
RegistrationEmailField = Annotated[
    str, transforms(sanitize_markup, trim), not_empty, is_email, allowed_email_domain
]
LoginPasswordField = Annotated[
    str,
    not_empty,
    min_length(PASSWORD_MIN_LENGTH, "Password must be at least {min_length} characters long"),
]
StrongPasswordField = Annotated[str, not_empty, strong_password]
RequiredText = Annotated[str, transforms(sanitize_markup, trim), not_empty]
PersonNameField = Annotated[str, transforms(sanitize_markup, trim), not_empty, max_length(50)]
CompanyNameField = Annotated[
    str, transforms(sanitize_markup, trim), min_length(2), max_length(100)
]
SlugField = Annotated[str, transforms(trim), min_length(2), max_length(50), is_slug]
DomainField = Annotated[str, transforms(trim), max_length(255), is_domain]
PhoneNumberField = Annotated[str, transforms(trim), is_phone_number]
