"""
Handlers for /api/settings/email and /api/settings/email/test.

Stored passwords are never returned: the settings model masks them on
serialization, and a blank password on save keeps the stored one.
"""

from typing import Optional

from models.email_settings import EmailSettings
from utils.auth_guard import ADMIN, STAFF, require_session
from utils.error_handling import handle_errors, json_response
from utils.http import parse_body

# Lazy-loaded service to avoid import-time DB connections
_settings_service: Optional["EmailSettingsService"] = None


def _get_settings_service():
    """Lazy-load EmailSettingsService."""
    global _settings_service
    if _settings_service is None:
        from services.factory import build_email_settings_service
        _settings_service = build_email_settings_service()
    return _settings_service


@handle_errors("Email settings lookup")
@require_session(STAFF)
def get_handler(event, context, session):
    settings = _get_settings_service().get_settings()
    return json_response(200, settings.model_dump_json())


@handle_errors("Email settings save")
@require_session(ADMIN)
def save_handler(event, context, session):
    incoming = EmailSettings.model_validate(parse_body(event))
    saved = _get_settings_service().save_settings(incoming)
    return json_response(200, saved.model_dump_json())


@handle_errors("Email connection test")
@require_session(ADMIN)
def test_handler(event, context, session):
    """Probe IMAP/SMTP with the posted values, or the stored ones when no body is sent."""
    body = parse_body(event)
    candidate = EmailSettings.model_validate(body) if body else None
    result = _get_settings_service().test_connection(candidate)
    return json_response(200, result.model_dump())
