"""
Repository tests against in-memory SQLite.

The SQL is written to run unchanged on PostgreSQL and SQLite.

Run with: pytest tests/unit/test_repositories.py -v
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import text

from models.email_settings import EmailSettings
from models.profile import Profile, Role
from models.ticket import MessageCreate, TicketCreate, TicketStatus
from repositories.profile_repo import ProfileRepository
from repositories.settings_repo import EmailSettingsRepository
from repositories.ticket_repo import FIRST_TICKET_NUMBER, MessageRepository, TicketRepository
from services.email_settings_service import EmailSettingsService
from services.report_service import ReportService
from utils.error_handling import DataServiceError


@pytest.fixture
def profiles(engine):
    repo = ProfileRepository(engine)
    repo.create(Profile(id="cust-1", full_name="Beta Ltda", email="beta@example.com", role=Role.CUSTOMER))
    repo.create(Profile(id="agent-1", full_name="Ana", email="ana@example.com", role=Role.AGENT))
    repo.create(Profile(id="admin-1", full_name="Zoe", email="zoe@example.com", role=Role.ADMIN))
    return repo


class TestProfileRepository:
    def test_list_by_roles_ordered_by_name(self, profiles):
        staff = profiles.list_by_roles([Role.AGENT, Role.ADMIN])
        assert [p.id for p in staff] == ["agent-1", "admin-1"]

    def test_update_and_get(self, profiles):
        assert profiles.update("agent-1", {"role": Role.ADMIN, "full_name": "Ana S."}) == 1
        updated = profiles.get("agent-1")
        assert updated.role == Role.ADMIN
        assert updated.full_name == "Ana S."

    def test_update_rejects_unknown_columns(self, profiles):
        with pytest.raises(ValueError):
            profiles.update("agent-1", {"id": "other"})

    def test_delete(self, profiles):
        assert profiles.delete("cust-1") == 1
        assert profiles.get("cust-1") is None

    def test_duplicate_id_is_data_service_error(self, profiles):
        with pytest.raises(DataServiceError):
            profiles.create(Profile(id="agent-1", full_name="Dup", role=Role.AGENT))


class TestTicketRepository:
    def test_numbers_start_at_floor_and_increase(self, engine, profiles):
        repo = TicketRepository(engine)
        first = repo.create(TicketCreate(subject="Printer", description="Jammed"), "cust-1")
        second = repo.create(TicketCreate(subject="VPN", description="Down", priority="high"), "cust-1")

        assert first.number == FIRST_TICKET_NUMBER
        assert second.number == FIRST_TICKET_NUMBER + 1
        assert first.status == TicketStatus.OPEN
        assert first.requester.full_name == "Beta Ltda"
        assert first.assignee is None

    def test_number_collision_is_retried(self, engine, profiles):
        repo = TicketRepository(engine)
        repo.create(TicketCreate(subject="Printer", description="Jammed"), "cust-1")

        with patch.object(TicketRepository, "_next_number", side_effect=[FIRST_TICKET_NUMBER, FIRST_TICKET_NUMBER + 1]):
            second = repo.create(TicketCreate(subject="VPN", description="Down"), "cust-1")

        assert second.number == FIRST_TICKET_NUMBER + 1

    def test_repeated_collision_is_data_service_error(self, engine, profiles):
        repo = TicketRepository(engine)
        repo.create(TicketCreate(subject="Printer", description="Jammed"), "cust-1")

        with patch.object(TicketRepository, "_next_number", return_value=FIRST_TICKET_NUMBER):
            with pytest.raises(DataServiceError):
                repo.create(TicketCreate(subject="VPN", description="Down"), "cust-1")

    def test_list_filters_and_search(self, engine, profiles):
        repo = TicketRepository(engine)
        printer = repo.create(TicketCreate(subject="Printer", description="Jammed"), "cust-1")
        repo.create(TicketCreate(subject="VPN", description="Down", assignee_id="agent-1"), "cust-1")

        assert [t.id for t in repo.list(search="JAM")] == [printer.id]
        assert [t.subject for t in repo.list(assignee_id="agent-1")] == ["VPN"]
        assert len(repo.list(limit=1)) == 1

    def test_update_changes_and_counts(self, engine, profiles):
        repo = TicketRepository(engine)
        ticket = repo.create(TicketCreate(subject="Printer", description="Jammed"), "cust-1")

        assert repo.update(ticket.id, {"status": "resolved", "assignee_id": "agent-1"}) == 1
        updated = repo.get(ticket.id)
        assert updated.status == TicketStatus.RESOLVED
        assert updated.assignee.full_name == "Ana"
        assert repo.count_by_status() == {"resolved": 1}
        assert repo.update("missing", {"status": "closed"}) == 0

    def test_report_rows_limited_to_range(self, engine, profiles):
        repo = TicketRepository(engine)
        with engine.begin() as conn:
            for index, created in enumerate(["2024-02-28T23:59:59+00:00", "2024-03-01T00:00:00+00:00"]):
                conn.execute(
                    text(
                        "INSERT INTO tickets (id, number, subject, description, status, priority, "
                        "requester_id, created_at) VALUES (:id, :number, 's', 'd', 'open', 'low', "
                        "'cust-1', :created_at)"
                    ),
                    {"id": f"t-{index}", "number": 2000 + index, "created_at": created},
                )

        rows = repo.list_for_report(
            datetime(2024, 3, 1, tzinfo=timezone.utc), datetime(2024, 4, 1, tzinfo=timezone.utc)
        )
        assert len(rows) == 1
        assert rows[0]["requester_name"] == "Beta Ltda"

    def test_report_names_fall_back_to_email(self, engine, profiles):
        profiles.create(Profile(id="agent-2", email="nameless@example.com", role=Role.AGENT))
        profiles.create(Profile(id="cust-2", email="quiet@example.com", role=Role.CUSTOMER))
        repo = TicketRepository(engine)
        repo.create(TicketCreate(subject="VPN", description="Down", assignee_id="agent-2"), "cust-2")
        repo.create(TicketCreate(subject="Printer", description="Jammed"), "cust-1")

        report = ReportService(repo).get_report("this_month")

        assert [(a.name, a.assigned) for a in report.agent_performance] == [
            ("nameless@example.com", 1),
            ("Unassigned", 1),
        ]
        assert [c.name for c in report.top_customers] == ["quiet@example.com", "Beta Ltda"]


class TestMessageRepository:
    def test_create_and_list_in_order(self, engine, profiles):
        ticket = TicketRepository(engine).create(TicketCreate(subject="S", description="D"), "cust-1")
        repo = MessageRepository(engine)
        repo.create(ticket.id, "cust-1", MessageCreate(body="Hello"))
        note = repo.create(ticket.id, "agent-1", MessageCreate(body="Check logs", internal=True))

        messages = repo.list_for_ticket(ticket.id)
        assert [m.body for m in messages] == ["Hello", "Check logs"]
        assert note.internal is True
        assert messages[1].sender.full_name == "Ana"


class TestEmailSettingsRepository:
    def test_insert_then_update_in_place(self, engine):
        repo = EmailSettingsRepository(engine)
        assert repo.get() is None

        saved = repo.upsert(EmailSettings(imap_password="imap-secret", blocked_domains=["Spam.com"]))
        assert saved.id

        loaded = repo.get()
        assert loaded.id == saved.id
        assert loaded.secret("imap_password") == "imap-secret"
        assert loaded.blocked_domains == ["spam.com"]
        assert loaded.smart_filtering is True

        repo.upsert(loaded.model_copy(update={"help_desk_name": "Acme Desk"}))
        with engine.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM email_settings")).scalar() == 1
        assert repo.get().help_desk_name == "Acme Desk"

    def test_update_with_unknown_id_inserts(self, engine):
        repo = EmailSettingsRepository(engine)

        saved = repo.upsert(EmailSettings(id="client-chosen", from_name="Desk"))

        assert saved.id != "client-chosen"
        stored = repo.get()
        assert stored is not None
        assert stored.id == saved.id
        assert stored.from_name == "Desk"

    def test_first_save_ignores_client_id(self, engine):
        repo = EmailSettingsRepository(engine)

        saved = EmailSettingsService(repo).save_settings(EmailSettings(id="client-chosen", from_name="Desk"))

        assert saved.id != "client-chosen"
        assert repo.get().id == saved.id
