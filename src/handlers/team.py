"""Handlers for /api/team and PATCH /api/profile."""

from typing import Optional

from models.profile import ProfileUpdate, RoleUpdate
from utils.auth_guard import ADMIN, STAFF, require_session
from utils.error_handling import handle_errors, json_response
from utils.http import parse_body, path_param

# Lazy-loaded service to avoid import-time connections
_team_service: Optional["TeamService"] = None


def _get_team_service():
    """Lazy-load TeamService."""
    global _team_service
    if _team_service is None:
        from services.factory import build_team_service
        _team_service = build_team_service()
    return _team_service


@handle_errors("Team listing")
@require_session(STAFF)
def list_handler(event, context, session):
    members = _get_team_service().list_team()
    return json_response(200, {"members": [m.model_dump(mode="json") for m in members]})


@handle_errors("Role update")
@require_session(ADMIN)
def update_role_handler(event, context, session):
    update = RoleUpdate.model_validate(parse_body(event))
    member = _get_team_service().update_role(path_param(event, "id"), update)
    return json_response(200, member.model_dump(mode="json"))


@handle_errors("Password reset")
@require_session(ADMIN)
def password_reset_handler(event, context, session):
    """Email a password reset link to a team member."""
    _get_team_service().send_password_reset(path_param(event, "id"))
    return json_response(200, {"ok": True})


@handle_errors("Profile update")
@require_session()
def update_profile_handler(event, context, session):
    update = ProfileUpdate.model_validate(parse_body(event))
    profile = _get_team_service().update_own_profile(session, update)
    return json_response(200, profile.model_dump(mode="json"))
