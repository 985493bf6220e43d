"""Pydantic models for API payloads and Data Service rows."""

from models.admin import AgentCreated, AgentCreateRequest  # noqa: F401
from models.email_settings import EmailSettings  # noqa: F401
from models.profile import (  # noqa: F401
    CustomerCreate,
    Profile,
    ProfileSummary,
    ProfileUpdate,
    Role,
    RoleUpdate,
    StaffRole,
)
from models.report import (  # noqa: F401
    AgentPerformance,
    CustomerVolume,
    DashboardSummary,
    MonthlyBucket,
    ReportTicket,
    TicketReport,
)
from models.session import SessionContext  # noqa: F401
from models.ticket import (  # noqa: F401
    Message,
    MessageCreate,
    Ticket,
    TicketCreate,
    TicketPriority,
    TicketStatus,
    TicketUpdate,
)
