"""Ticket lifecycle: listing, submission, status/assignee/priority updates and replies."""

from __future__ import annotations

from typing import List, Optional

from models.session import SessionContext
from models.ticket import Message, MessageCreate, Ticket, TicketCreate, TicketUpdate
from repositories.profile_repo import ProfileRepository
from repositories.ticket_repo import MessageRepository, TicketRepository
from utils.error_handling import NotFoundError, PermissionDeniedError, ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class TicketService:
    """Encapsulates ticket rules on top of the repositories."""

    def __init__(
        self,
        tickets: TicketRepository,
        messages: MessageRepository,
        profiles: ProfileRepository,
    ):
        self.tickets = tickets
        self.messages = messages
        self.profiles = profiles

    def list_tickets(self, **filters) -> List[Ticket]:
        return self.tickets.list(**filters)

    def get_ticket(self, ticket_id: str, session: SessionContext) -> Ticket:
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket not found")
        # The API runs with privileged database credentials, so row ownership
        # is checked here for customer sessions.
        if not session.is_staff and ticket.requester_id != session.user_id:
            raise PermissionDeniedError("You can only view your own tickets")
        return ticket

    def create_ticket(self, payload: TicketCreate, session: SessionContext) -> Ticket:
        requester_id = session.user_id
        if session.is_staff and payload.requester_id:
            requester_id = payload.requester_id
            if self.profiles.get(requester_id) is None:
                raise ValidationError("requester_id does not match a profile")
        if payload.assignee_id:
            self._ensure_staff(payload.assignee_id)

        ticket = self.tickets.create(payload, requester_id)
        logger.info(
            "Ticket created",
            extra={"ticket_id": ticket.id, "number": ticket.number, "requester_id": requester_id},
        )
        return ticket

    def update_ticket(self, ticket_id: str, update: TicketUpdate) -> Ticket:
        changes = update.changes()
        if changes.get("assignee_id"):
            self._ensure_staff(changes["assignee_id"])

        if self.tickets.update(ticket_id, changes) == 0:
            raise NotFoundError("Ticket not found")
        logger.info("Ticket updated", extra={"ticket_id": ticket_id, "fields": sorted(changes)})
        return self.tickets.get(ticket_id)

    def list_messages(self, ticket_id: str, session: SessionContext) -> List[Message]:
        self.get_ticket(ticket_id, session)
        return self.messages.list_for_ticket(ticket_id)

    def add_message(
        self, ticket_id: str, payload: MessageCreate, session: SessionContext
    ) -> Message:
        self.get_ticket(ticket_id, session)
        if payload.internal and not session.is_staff:
            raise PermissionDeniedError("Only staff can add internal notes")
        message = self.messages.create(ticket_id, session.user_id, payload)
        logger.info(
            "Ticket message added",
            extra={"ticket_id": ticket_id, "internal": payload.internal},
        )
        return message

    def _ensure_staff(self, profile_id: Optional[str]) -> None:
        profile = self.profiles.get(profile_id) if profile_id else None
        if profile is None or not profile.is_staff:
            raise ValidationError("assignee_id must reference an agent or admin")
