"""Handlers for GET /api/reports and GET /api/dashboard."""

from typing import Optional

from utils.auth_guard import STAFF, require_session
from utils.error_handling import handle_errors, json_response
from utils.http import query_params

# Lazy-loaded service so the report cache survives warm invocations
_report_service: Optional["ReportService"] = None


def _get_report_service():
    """Lazy-load ReportService."""
    global _report_service
    if _report_service is None:
        from services.factory import build_report_service
        _report_service = build_report_service()
    return _report_service


@handle_errors("Report")
@require_session(STAFF)
def report_handler(event, context, session):
    """Aggregated ticket report for ?period=&start=&end=."""
    params = query_params(event)
    report = _get_report_service().get_report(
        period=params.get("period"),
        start=params.get("start"),
        end=params.get("end"),
    )
    return json_response(200, report.model_dump_json())


@handle_errors("Dashboard")
@require_session(STAFF)
def dashboard_handler(event, context, session):
    summary = _get_report_service().dashboard_summary()
    return json_response(200, summary.model_dump_json())
