"""Profile models (customers, agents and admins)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from utils.validators import clean_optional, normalize_email


class Role(str, Enum):
    """Profile roles stored in the profiles table."""

    CUSTOMER = "customer"
    AGENT = "agent"
    ADMIN = "admin"


STAFF_ROLES = frozenset({Role.AGENT, Role.ADMIN})


class ProfileSummary(BaseModel):
    """Joined requester/assignee/sender shape."""

    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Unknown"


class Profile(BaseModel):
    """A person record as stored by the Data Service."""

    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Role = Role.CUSTOMER
    avatar_url: Optional[str] = None
    cnpj: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return str(value) if value is not None else value

    @field_validator("role", mode="before")
    @classmethod
    def default_unknown_role(cls, value):
        """Rows with a missing or unexpected role are treated as customers."""
        try:
            return Role(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            return Role.CUSTOMER

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Unknown"

    @property
    def address(self) -> str:
        parts = [
            self.address_line1,
            self.address_line2,
            self.city,
            self.state,
            self.postal_code,
            self.country,
        ]
        return ", ".join(p for p in parts if p)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class CustomerCreate(BaseModel):
    """Payload for POST /api/customers. Creates a profile row only."""

    full_name: str
    email: str
    cnpj: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("full_name must be provided")
        return cleaned

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator(
        "cnpj",
        "phone",
        "address_line1",
        "address_line2",
        "city",
        "state",
        "postal_code",
        "country",
    )
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return clean_optional(value)


class ProfileUpdate(BaseModel):
    """Payload for PATCH /api/profile (the caller's own profile)."""

    full_name: str
    avatar_url: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("full_name must be provided")
        return cleaned

    @field_validator("avatar_url")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return clean_optional(value)


class StaffRole(str, Enum):
    """Roles an admin may grant to team members."""

    AGENT = "agent"
    ADMIN = "admin"


class RoleUpdate(BaseModel):
    """Payload for PATCH /api/team/{id}."""

    role: StaffRole
