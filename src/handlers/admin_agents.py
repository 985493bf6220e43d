"""
Handlers for POST /api/admin/agents and DELETE /api/admin/agents/{id}.

Only admins reach these; the provisioning service does the two-step
identity + profile writes.
"""

from typing import Optional

from models.admin import AgentCreateRequest, AgentCreated
from utils.auth_guard import ADMIN, require_session
from utils.error_handling import handle_errors, json_response
from utils.http import parse_body, path_param
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Lazy-loaded service to avoid import-time connections
_provisioning_service: Optional["ProvisioningService"] = None


def _get_provisioning_service():
    """Lazy-load ProvisioningService."""
    global _provisioning_service
    if _provisioning_service is None:
        from services.factory import build_provisioning_service
        _provisioning_service = build_provisioning_service()
    return _provisioning_service


@handle_errors("Agent creation")
@require_session(ADMIN)
def create_handler(event, context, session):
    """Provision a staff account and return its id."""
    request = AgentCreateRequest.model_validate(parse_body(event))
    agent_id = _get_provisioning_service().create_agent(request)
    logger.info("Agent created by admin", extra={"admin_id": session.user_id, "agent_id": agent_id})
    return json_response(200, AgentCreated(id=agent_id).model_dump())


@handle_errors("Agent deletion")
@require_session(ADMIN)
def delete_handler(event, context, session):
    """Remove a staff account's profile, then its identity."""
    agent_id = path_param(event, "id")
    result = _get_provisioning_service().delete_agent(agent_id)
    logger.info("Agent deleted by admin", extra={"admin_id": session.user_id, "agent_id": agent_id})
    return json_response(200, result)
