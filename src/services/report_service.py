"""
Reports and dashboard service.

Resolves a reporting period to a UTC date range, pulls the report
projection for that range and folds it with the aggregation functions.
Results are cached per query identity so concurrent requests for different
periods can never overwrite each other.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from models.report import DashboardSummary, ReportTicket, TicketReport
from repositories.ticket_repo import TicketRepository
from services.aggregation_service import build_report, month_key, status_distribution, to_utc
from utils.cache_service import LRUCache
from utils.error_handling import ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)

PERIODS = ("this_week", "this_month", "last_month", "this_year", "custom")
DEFAULT_PERIOD = "this_month"


def _month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _next_month(moment: datetime) -> datetime:
    if moment.month == 12:
        return _month_start(moment.year + 1, 1)
    return _month_start(moment.year, moment.month + 1)


def _parse_boundary(value: str, field: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        try:
            day = date.fromisoformat(str(value).strip())
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 date") from None
        parsed = datetime(day.year, day.month, day.day)
    return to_utc(parsed)


def resolve_period(
    period: Optional[str],
    now: datetime,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Tuple[str, datetime, datetime]:
    """Return ``(period, start, end)`` with an inclusive start and exclusive end."""
    period = (period or DEFAULT_PERIOD).strip().lower()
    now = to_utc(now)
    today = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)

    if period == "this_week":
        range_start = today - timedelta(days=today.weekday())
        return period, range_start, range_start + timedelta(days=7)
    if period == "this_month":
        range_start = _month_start(now.year, now.month)
        return period, range_start, _next_month(range_start)
    if period == "last_month":
        range_end = _month_start(now.year, now.month)
        previous = range_end - timedelta(days=1)
        return period, _month_start(previous.year, previous.month), range_end
    if period == "this_year":
        return (
            period,
            datetime(now.year, 1, 1, tzinfo=timezone.utc),
            datetime(now.year + 1, 1, 1, tzinfo=timezone.utc),
        )
    if period == "custom":
        if not start or not end:
            raise ValidationError("start and end are required for a custom period")
        range_start = _parse_boundary(start, "start")
        range_end = _parse_boundary(end, "end")
        if len(end.strip()) == 10:
            # a date-only end covers that whole day
            range_end += timedelta(days=1)
        if range_end <= range_start:
            raise ValidationError("end must be after start")
        return period, range_start, range_end

    raise ValidationError(f"Unknown period '{period}'; expected one of {', '.join(PERIODS)}")


class ReportService:
    """Builds ticket reports and dashboard counters."""

    def __init__(self, tickets: TicketRepository, cache: Optional[LRUCache] = None):
        self.tickets = tickets
        self.cache = cache if cache is not None else LRUCache(max_size=100, ttl_seconds=300)

    def get_report(
        self,
        period: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TicketReport:
        now = to_utc(now or datetime.now(timezone.utc))
        period, range_start, range_end = resolve_period(period, now, start, end)
        cache_key = (
            period,
            range_start.isoformat(),
            range_end.isoformat(),
            month_key(now.year, now.month),
        )

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Report cache hit", extra={"period": period})
            return cached

        rows = self._load_rows(range_start, range_end)
        report = build_report(rows, period=period, start=range_start, end=range_end, now=now)
        self.cache.set(cache_key, report)
        logger.info(
            "Report built",
            extra={"period": period, "total_tickets": report.total_tickets},
        )
        return report

    def dashboard_summary(self, recent_limit: int = 5) -> DashboardSummary:
        """Counts per status over all tickets plus the latest ones."""
        counts = status_distribution([])
        for status, total in self.tickets.count_by_status().items():
            if status in counts:
                counts[status] = total
        return DashboardSummary(
            status_counts=counts,
            recent_tickets=self.tickets.list_recent(recent_limit),
        )

    def _load_rows(self, start: datetime, end: datetime) -> List[ReportTicket]:
        rows: List[ReportTicket] = []
        skipped = 0
        for raw in self.tickets.list_for_report(start, end):
            try:
                rows.append(ReportTicket.model_validate(raw))
            except PydanticValidationError:
                skipped += 1
        if skipped:
            logger.warning("Skipped malformed report rows", extra={"skipped": skipped})
        return rows
