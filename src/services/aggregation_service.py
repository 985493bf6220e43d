"""
Ticket report aggregation.

Pure in-memory folds over ticket rows that the caller has already filtered
by date range. Nothing here performs I/O or mutates its input, so running
the same list twice yields identical output.
"""

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from models.report import (
    AgentPerformance,
    CustomerVolume,
    MonthlyBucket,
    ReportTicket,
    TicketReport,
)
from models.ticket import TicketStatus

MONTHS_IN_SERIES = 7
TOP_CUSTOMERS_LIMIT = 5
UNASSIGNED = "Unassigned"
UNKNOWN_CUSTOMER = "Unknown"
RESOLVED = TicketStatus.RESOLVED.value


def to_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def monthly_series(tickets: Iterable[ReportTicket], now: datetime) -> List[MonthlyBucket]:
    """
    New vs resolved counts for the current month and the six before it.

    Buckets run oldest to newest. Tickets created outside the window are
    left out of this view only.
    """
    now = to_utc(now)
    buckets: "OrderedDict[str, MonthlyBucket]" = OrderedDict()
    current = now.year * 12 + (now.month - 1)
    for offset in range(MONTHS_IN_SERIES - 1, -1, -1):
        year, month_index = divmod(current - offset, 12)
        key = month_key(year, month_index + 1)
        buckets[key] = MonthlyBucket(key=key, label=calendar.month_abbr[month_index + 1])

    for ticket in tickets:
        created = to_utc(ticket.created_at)
        bucket = buckets.get(month_key(created.year, created.month))
        if bucket is None:
            continue
        bucket.new += 1
        if ticket.status == RESOLVED:
            bucket.resolved += 1

    return list(buckets.values())


def status_distribution(tickets: Iterable[ReportTicket]) -> Dict[str, int]:
    """Counts per known status in canonical order; unknown statuses are skipped."""
    counts: Dict[str, int] = OrderedDict((status.value, 0) for status in TicketStatus)
    for ticket in tickets:
        if ticket.status in counts:
            counts[ticket.status] += 1
    return dict(counts)


def agent_performance(tickets: Iterable[ReportTicket]) -> List[AgentPerformance]:
    """Assigned/resolved per assignee, busiest first; ties keep first-seen order."""
    groups: Dict[str, AgentPerformance] = {}
    for ticket in tickets:
        name = ticket.assignee_name or UNASSIGNED
        group = groups.setdefault(name, AgentPerformance(name=name))
        group.assigned += 1
        if ticket.status == RESOLVED:
            group.resolved += 1
    return sorted(groups.values(), key=lambda g: g.assigned, reverse=True)


def top_customers(
    tickets: Iterable[ReportTicket], limit: int = TOP_CUSTOMERS_LIMIT
) -> List[CustomerVolume]:
    """Ticket volume per requester, highest first, truncated to ``limit``."""
    groups: Dict[str, CustomerVolume] = {}
    for ticket in tickets:
        name = ticket.requester_name or UNKNOWN_CUSTOMER
        group = groups.setdefault(name, CustomerVolume(name=name))
        group.tickets += 1
    ranked = sorted(groups.values(), key=lambda g: g.tickets, reverse=True)
    return ranked[:limit]


def resolution_rate(total: int, resolved: int) -> float:
    if total == 0:
        return 0.0
    return resolved / total


def build_report(
    tickets: Sequence[ReportTicket],
    *,
    period: str,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> TicketReport:
    """Run every aggregation over one date range."""
    now = to_utc(now or datetime.now(timezone.utc))
    total = len(tickets)
    resolved = sum(1 for t in tickets if t.status == RESOLVED)

    return TicketReport(
        period=period,
        start=start,
        end=end,
        total_tickets=total,
        resolved_tickets=resolved,
        resolution_rate=resolution_rate(total, resolved),
        monthly=monthly_series(tickets, now),
        status_distribution=status_distribution(tickets),
        agent_performance=agent_performance(tickets),
        top_customers=top_customers(tickets),
        generated_at=now,
    )
