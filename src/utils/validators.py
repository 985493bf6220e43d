"""Lightweight validation helpers shared by services and models."""

from typing import Any, Optional

from utils.error_handling import ValidationError


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError if value is falsy or only whitespace."""
    if value is None or value == [] or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Strip a string and turn blanks into None."""
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def normalize_email(value: str) -> str:
    """Lower-case and strip an email, rejecting obviously malformed ones."""
    cleaned = (value or "").strip().lower()
    if not cleaned:
        raise ValueError("email must be provided")
    local, _, domain = cleaned.partition("@")
    if not local or "." not in domain:
        raise ValueError("email must be a valid address")
    return cleaned


def email_domain(address: str) -> str:
    """Return the lower-cased domain of an address, tolerating 'Name <a@b>' forms."""
    value = (address or "").strip()
    if "<" in value and value.endswith(">"):
        value = value[value.rindex("<") + 1 : -1]
    return value.rpartition("@")[2].strip().lower()
