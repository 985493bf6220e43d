"""Handlers for /api/auth/login, /api/auth/logout and /api/auth/me."""

from utils import auth_guard
from utils.auth_guard import require_session
from utils.error_handling import handle_errors, json_response
from utils.http import header, parse_body


def _session_body(session) -> dict:
    return session.model_dump(mode="json")


@handle_errors("Sign-in")
def login_handler(event, context):
    """Exchange email/password for a session with tokens."""
    payload = parse_body(event)
    session = auth_guard._get_auth_service().sign_in(
        payload.get("email") or "",
        payload.get("password") or "",
        language=header(event, "X-Language"),
    )
    body = _session_body(session)
    body["access_token"] = session.access_token
    body["refresh_token"] = session.refresh_token
    return json_response(200, body)


@handle_errors("Sign-out")
@require_session()
def logout_handler(event, context, session):
    auth_guard._get_auth_service().sign_out(session)
    return json_response(200, {"ok": True})


@handle_errors("Session lookup")
@require_session()
def me_handler(event, context, session):
    """Return the caller's session without tokens."""
    return json_response(200, _session_body(session))
