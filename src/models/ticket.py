"""Ticket and message models."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.profile import ProfileSummary


class TicketStatus(str, Enum):
    """Lifecycle states, in canonical report order."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Priority levels shown in the ticket tables."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _normalize_tags(value: Any) -> List[str]:
    """Accept a list, a JSON array string, a comma list or null."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _summary_from_row(row: Mapping[str, Any], prefix: str) -> Optional[ProfileSummary]:
    """Build a joined profile summary from ``<prefix>_id/_name/_email/_avatar`` columns."""
    profile_id = row.get(f"{prefix}_id")
    if profile_id is None:
        return None
    return ProfileSummary(
        id=str(profile_id),
        full_name=row.get(f"{prefix}_name"),
        email=row.get(f"{prefix}_email"),
        avatar_url=row.get(f"{prefix}_avatar"),
    )


class Ticket(BaseModel):
    """A support request with its joined requester and assignee."""

    id: str
    number: Optional[int] = None
    subject: str
    description: str = ""
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    requester_id: str
    assignee_id: Optional[str] = None
    requester: Optional[ProfileSummary] = None
    assignee: Optional[ProfileSummary] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("id", "requester_id", "assignee_id", mode="before")
    @classmethod
    def coerce_ids(cls, value):
        return str(value) if value is not None else value

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return _normalize_tags(value)

    @property
    def reference(self) -> str:
        """Human-readable ticket reference, e.g. T-1024."""
        if self.number is not None:
            return f"T-{self.number}"
        return self.id[:8]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Ticket":
        """Validate a joined tickets/profiles row."""
        data: Dict[str, Any] = dict(row)
        data["requester"] = _summary_from_row(row, "requester")
        data["assignee"] = _summary_from_row(row, "assignee")
        return cls.model_validate(data)


class TicketCreate(BaseModel):
    """Payload for POST /api/tickets."""

    subject: str
    description: str
    priority: TicketPriority = TicketPriority.MEDIUM
    requester_id: Optional[str] = None
    assignee_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("subject", "description")
    @classmethod
    def validate_required(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("subject and description must be provided")
        return cleaned

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return _normalize_tags(value)


class TicketUpdate(BaseModel):
    """
    Payload for PATCH /api/tickets/{id}.

    Only fields present in the payload are written; an explicit null
    ``assignee_id`` unassigns the ticket.
    """

    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assignee_id: Optional[str] = None

    @model_validator(mode="after")
    def require_a_change(self) -> "TicketUpdate":
        if not self.model_fields_set & {"status", "priority", "assignee_id"}:
            raise ValueError("at least one of status, priority or assignee_id is required")
        if "status" in self.model_fields_set and self.status is None:
            raise ValueError("status cannot be null")
        if "priority" in self.model_fields_set and self.priority is None:
            raise ValueError("priority cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Column values to write, keyed by column name."""
        data = self.model_dump(include=self.model_fields_set, mode="json")
        if "assignee_id" in data and data["assignee_id"] == "":
            data["assignee_id"] = None
        return data


class Message(BaseModel):
    """A reply or internal note on a ticket."""

    id: str
    ticket_id: str
    sender_id: str
    sender: Optional[ProfileSummary] = None
    body: str
    internal: bool = False
    created_at: datetime

    @field_validator("id", "ticket_id", "sender_id", mode="before")
    @classmethod
    def coerce_ids(cls, value):
        return str(value) if value is not None else value

    @field_validator("internal", mode="before")
    @classmethod
    def coerce_flag(cls, value):
        return bool(value)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Message":
        data: Dict[str, Any] = dict(row)
        data["sender"] = _summary_from_row(row, "sender")
        return cls.model_validate(data)


class MessageCreate(BaseModel):
    """Payload for POST /api/tickets/{id}/messages."""

    body: str
    internal: bool = False

    @field_validator("body")
    @classmethod
    def validate_body(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("body must be provided")
        return cleaned
