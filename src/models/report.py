"""Report and dashboard models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from models.ticket import Ticket


class ReportTicket(BaseModel):
    """
    Minimal ticket projection consumed by the aggregation fold.

    ``status`` stays a free string so rows with unexpected values can be
    counted in totals and skipped by the status distribution.
    """

    status: str = ""
    priority: Optional[str] = None
    created_at: datetime
    requester_name: Optional[str] = None
    assignee_name: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> str:
        return str(getattr(value, "value", value) or "").strip()


class MonthlyBucket(BaseModel):
    key: str
    label: str
    new: int = 0
    resolved: int = 0


class AgentPerformance(BaseModel):
    name: str
    assigned: int = 0
    resolved: int = 0


class CustomerVolume(BaseModel):
    name: str
    tickets: int = 0


class TicketReport(BaseModel):
    """All report views for one date range."""

    period: str
    start: datetime
    end: datetime
    total_tickets: int
    resolved_tickets: int
    resolution_rate: float
    monthly: List[MonthlyBucket]
    status_distribution: Dict[str, int]
    agent_performance: List[AgentPerformance]
    top_customers: List[CustomerVolume]
    generated_at: datetime


class DashboardSummary(BaseModel):
    """Status counters plus the latest tickets."""

    status_counts: Dict[str, int]
    recent_tickets: List[Ticket] = Field(default_factory=list)
