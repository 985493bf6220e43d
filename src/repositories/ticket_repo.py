"""Tickets and ticket messages collections."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.ticket import Message, MessageCreate, Ticket, TicketCreate, TicketStatus
from repositories.postgres_repo import PostgresRepository
from utils.logging_config import get_logger

logger = get_logger(__name__)

FIRST_TICKET_NUMBER = 1001
MAX_LIST_LIMIT = 500
NUMBER_ALLOCATION_ATTEMPTS = 2

_TICKET_SELECT = """
SELECT t.id, t.number, t.subject, t.description, t.status, t.priority, t.tags,
       t.created_at, t.updated_at,
       t.requester_id, r.full_name AS requester_name, r.email AS requester_email,
       r.avatar_url AS requester_avatar,
       t.assignee_id, a.full_name AS assignee_name, a.email AS assignee_email,
       a.avatar_url AS assignee_avatar
FROM tickets t
LEFT JOIN profiles r ON r.id = t.requester_id
LEFT JOIN profiles a ON a.id = t.assignee_id
"""

_REPORT_SELECT = """
SELECT t.status, t.priority, t.created_at,
       COALESCE(NULLIF(r.full_name, ''), r.email) AS requester_name,
       COALESCE(NULLIF(a.full_name, ''), a.email, t.assignee_id) AS assignee_name
FROM tickets t
LEFT JOIN profiles r ON r.id = t.requester_id
LEFT JOIN profiles a ON a.id = t.assignee_id
WHERE t.created_at >= :start AND t.created_at < :end
"""

_TICKET_INSERT = text(
    """
    INSERT INTO tickets (id, number, subject, description, status, priority,
                         requester_id, assignee_id, tags, created_at, updated_at)
    VALUES (:id, :number, :subject, :description, :status, :priority,
            :requester_id, :assignee_id, :tags, :created_at, :updated_at)
    """
)

_MESSAGE_SELECT = """
SELECT m.id, m.ticket_id, m.sender_id, m.body, m.internal, m.created_at,
       p.full_name AS sender_name, p.email AS sender_email, p.avatar_url AS sender_avatar
FROM ticket_messages m
LEFT JOIN profiles p ON p.id = m.sender_id
"""

UPDATABLE_COLUMNS = frozenset({"status", "priority", "assignee_id"})


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TicketRepository(PostgresRepository):
    """Joined reads and writes over the tickets table."""

    def get(self, ticket_id: str) -> Optional[Ticket]:
        row = self.fetch_one(f"{_TICKET_SELECT} WHERE t.id = :id", {"id": ticket_id})
        return Ticket.from_row(row) if row else None

    def list(
        self,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assignee_id: Optional[str] = None,
        requester_id: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> List[Ticket]:
        """Tickets matching every given filter, newest first."""
        clauses: List[str] = []
        params: Dict[str, Any] = {"limit": max(1, min(int(limit), MAX_LIST_LIMIT))}
        for column, value in (
            ("status", status),
            ("priority", priority),
            ("assignee_id", assignee_id),
            ("requester_id", requester_id),
        ):
            if value:
                clauses.append(f"t.{column} = :{column}")
                params[column] = value
        if search:
            clauses.append("(LOWER(t.subject) LIKE :search OR LOWER(t.description) LIKE :search)")
            params["search"] = f"%{search.strip().lower()}%"

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self.fetch_all(
            f"{_TICKET_SELECT} {where} ORDER BY t.created_at DESC LIMIT :limit", params
        )
        return [Ticket.from_row(row) for row in rows]

    def list_recent(self, limit: int = 5) -> List[Ticket]:
        return self.list(limit=limit)

    def create(self, payload: TicketCreate, requester_id: str) -> Ticket:
        """
        Insert an open ticket, allocating the next human-readable number.

        Numbers come from MAX(number) + 1, so a concurrent insert can take
        the same number first; the unique constraint rejects ours and the
        allocation is retried.
        """
        ticket_id = str(uuid.uuid4())
        now = _now()
        params = {
            "id": ticket_id,
            "subject": payload.subject,
            "description": payload.description,
            "status": TicketStatus.OPEN.value,
            "priority": payload.priority.value,
            "requester_id": requester_id,
            "assignee_id": payload.assignee_id,
            "tags": json.dumps(payload.tags) if payload.tags else None,
            "created_at": now,
            "updated_at": now,
        }
        for attempt in range(1, NUMBER_ALLOCATION_ATTEMPTS + 1):
            try:
                with self.engine.begin() as conn:
                    params["number"] = self._next_number(conn)
                    conn.execute(_TICKET_INSERT, params)
                break
            except IntegrityError as exc:
                if attempt == NUMBER_ALLOCATION_ATTEMPTS:
                    raise self._wrap(exc) from exc
                logger.warning(
                    "Ticket number taken, retrying",
                    extra={"number": params["number"], "attempt": attempt},
                )
            except SQLAlchemyError as exc:
                raise self._wrap(exc) from exc
        return self.get(ticket_id)

    @staticmethod
    def _next_number(conn) -> int:
        return conn.execute(
            text("SELECT COALESCE(MAX(number), :floor) + 1 FROM tickets"),
            {"floor": FIRST_TICKET_NUMBER - 1},
        ).scalar()

    def update(self, ticket_id: str, changes: Dict[str, Any]) -> int:
        """Write status/priority/assignee changes and bump updated_at."""
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update ticket columns: {sorted(unknown)}")
        params = {c: getattr(v, "value", v) for c, v in changes.items()}
        params["updated_at"] = _now()
        params["id"] = ticket_id
        assignments = ", ".join(f"{c} = :{c}" for c in list(changes) + ["updated_at"])
        return self.execute(f"UPDATE tickets SET {assignments} WHERE id = :id", params)

    def count_by_status(self) -> Dict[str, int]:
        rows = self.fetch_all("SELECT status, COUNT(*) AS total FROM tickets GROUP BY status")
        return {str(row["status"]): int(row["total"]) for row in rows}

    def list_for_report(self, start: datetime, end: datetime) -> List[dict]:
        """Raw report projection rows created in [start, end)."""
        return self.fetch_all(
            f"{_REPORT_SELECT} ORDER BY t.created_at ASC",
            {"start": start.isoformat(), "end": end.isoformat()},
        )


class MessageRepository(PostgresRepository):
    """Replies and internal notes attached to tickets."""

    def list_for_ticket(self, ticket_id: str) -> List[Message]:
        rows = self.fetch_all(
            f"{_MESSAGE_SELECT} WHERE m.ticket_id = :ticket_id ORDER BY m.created_at ASC",
            {"ticket_id": ticket_id},
        )
        return [Message.from_row(row) for row in rows]

    def create(self, ticket_id: str, sender_id: str, payload: MessageCreate) -> Message:
        message_id = str(uuid.uuid4())
        self.execute(
            """
            INSERT INTO ticket_messages (id, ticket_id, sender_id, body, internal, created_at)
            VALUES (:id, :ticket_id, :sender_id, :body, :internal, :created_at)
            """,
            {
                "id": message_id,
                "ticket_id": ticket_id,
                "sender_id": sender_id,
                "body": payload.body,
                "internal": payload.internal,
                "created_at": _now(),
            },
        )
        row = self.fetch_one(f"{_MESSAGE_SELECT} WHERE m.id = :id", {"id": message_id})
        return Message.from_row(row)
