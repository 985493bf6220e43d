"""Payloads for the admin agent provisioning endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from models.profile import StaffRole
from utils.validators import normalize_email

REQUIRED_MESSAGE = "full_name and email are required"


class AgentCreateRequest(BaseModel):
    """Body of POST /api/admin/agents."""

    full_name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    role: StaffRole = StaffRole.AGENT

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_name(cls, value) -> str:
        cleaned = str(value or "").strip()
        if not cleaned:
            raise ValueError(REQUIRED_MESSAGE)
        return cleaned

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value) -> str:
        if not str(value or "").strip():
            raise ValueError(REQUIRED_MESSAGE)
        return normalize_email(str(value))

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, value):
        """A missing or blank role provisions a regular agent."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return StaffRole.AGENT
        return value.strip().lower() if isinstance(value, str) else value


class AgentCreated(BaseModel):
    id: str
