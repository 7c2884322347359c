"""
Field-level validation rules shared by the form schemas.

The functions here raise ValueError so they can be called from pydantic
`field_validator` / `model_validator` hooks and surface as 422 responses.
"""
import re
from typing import Optional

PHONE_PATTERN = re.compile(r"^[\d\s\(\)\-]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@([^\s@.]+\.)+[A-Za-z]{2,}$")
US_ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
MONEY_STRIP_PATTERN = re.compile(r"[^0-9.]")

MIN_PHONE_DIGITS = 10


def normalize_email(email: Optional[str]) -> str:
    """Trim and lowercase an email for comparisons."""
    return (email or "").strip().lower()


def is_valid_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.match(value.strip()))


def is_valid_phone(value: Optional[str]) -> bool:
    if not value or not PHONE_PATTERN.match(value):
        return False
    return sum(ch.isdigit() for ch in value) >= MIN_PHONE_DIGITS


def check_email(value: str) -> str:
    """Validate an email address; returns it trimmed."""
    if not is_valid_email(value):
        raise ValueError("Please enter a valid email address")
    return value.strip()


def check_optional_email(value: Optional[str]) -> Optional[str]:
    """Like check_email but accepts None and the empty string."""
    if value is None or value.strip() == "":
        return value
    return check_email(value)


def check_phone(value: str) -> str:
    """Validate a phone number: digits, spaces, parentheses, dashes; at least 10 digits."""
    if not value or not PHONE_PATTERN.match(value):
        raise ValueError("Phone number can only contain digits, spaces, parentheses, and dashes")
    if sum(ch.isdigit() for ch in value) < MIN_PHONE_DIGITS:
        raise ValueError("Phone number must contain at least 10 digits")
    return value


def check_optional_phone(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip() == "":
        return value
    return check_phone(value)


def check_us_zip(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return value
    if not US_ZIP_PATTERN.match(value):
        raise ValueError("Please enter a valid US ZIP code")
    return value


def parse_money(value: Optional[str]) -> Optional[float]:
    """
    Parse a user-entered money string ("$12,500.00") to a float.

    Everything except digits and '.' is dropped. Returns None if nothing
    numeric remains.
    """
    if value is None:
        return None
    cleaned = MONEY_STRIP_PATTERN.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return None


def check_filler_details(
    filled_by: str,
    filler_relationship: Optional[str],
    filler_first_name: Optional[str],
    filler_last_name: Optional[str],
    filler_email: Optional[str],
    filler_phone: Optional[str],
) -> None:
    """
    Enforce the "someone else is filling this in" rule.

    When filled_by is 'someone_else' every filler field is required and the
    filler's email and phone must be valid.
    """
    if filled_by != "someone_else":
        return
    required = (filler_relationship, filler_first_name, filler_last_name, filler_email, filler_phone)
    if not all(v and v.strip() for v in required):
        raise ValueError("filler_relationship: Please fill in all filler information")
    if not is_valid_email(filler_email):
        raise ValueError("filler_email: Please enter a valid email address")
    if not is_valid_phone(filler_phone):
        raise ValueError("filler_phone: Please enter a valid phone number")
