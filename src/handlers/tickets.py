"""Handlers for /api/tickets and /api/tickets/{id}/messages."""

from typing import Optional

from models.ticket import MessageCreate, TicketCreate, TicketUpdate
from utils.auth_guard import STAFF, require_session
from utils.error_handling import ValidationError, handle_errors, json_response
from utils.http import parse_body, path_param, query_params

# Lazy-loaded service to avoid import-time DB connections
_ticket_service: Optional["TicketService"] = None

LIST_FILTERS = ("status", "priority", "assignee_id", "requester_id", "search")


def _get_ticket_service():
    """Lazy-load TicketService."""
    global _ticket_service
    if _ticket_service is None:
        from services.factory import build_ticket_service
        _ticket_service = build_ticket_service()
    return _ticket_service


def _dump(items) -> list:
    return [item.model_dump(mode="json") for item in items]


@handle_errors("Ticket listing")
@require_session(STAFF)
def list_handler(event, context, session):
    params = query_params(event)
    filters = {name: params[name] for name in LIST_FILTERS if params.get(name)}
    if params.get("limit"):
        try:
            filters["limit"] = int(params["limit"])
        except ValueError:
            raise ValidationError("limit must be an integer")
    tickets = _get_ticket_service().list_tickets(**filters)
    return json_response(200, {"tickets": _dump(tickets)})


@handle_errors("Ticket creation")
@require_session()
def create_handler(event, context, session):
    payload = TicketCreate.model_validate(parse_body(event))
    ticket = _get_ticket_service().create_ticket(payload, session)
    return json_response(200, ticket.model_dump(mode="json"))


@handle_errors("Ticket lookup")
@require_session()
def get_handler(event, context, session):
    ticket = _get_ticket_service().get_ticket(path_param(event, "id"), session)
    return json_response(200, ticket.model_dump(mode="json"))


@handle_errors("Ticket update")
@require_session(STAFF)
def update_handler(event, context, session):
    """Change status, priority and/or assignee."""
    update = TicketUpdate.model_validate(parse_body(event))
    ticket = _get_ticket_service().update_ticket(path_param(event, "id"), update)
    return json_response(200, ticket.model_dump(mode="json"))


@handle_errors("Ticket message listing")
@require_session()
def list_messages_handler(event, context, session):
    messages = _get_ticket_service().list_messages(path_param(event, "id"), session)
    return json_response(200, {"messages": _dump(messages)})


@handle_errors("Ticket reply")
@require_session()
def add_message_handler(event, context, session):
    payload = MessageCreate.model_validate(parse_body(event))
    message = _get_ticket_service().add_message(path_param(event, "id"), payload, session)
    return json_response(200, message.model_dump(mode="json"))
