"""
Table definitions for the help desk collections.

Used by create_schema.py against the hosted Postgres database and by the
test suite against SQLite. Repositories query with parameterized SQL text;
these definitions only describe the layout.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    false,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

profiles = Table(
    "profiles",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("full_name", Text),
    Column("email", Text),
    Column("role", String(16), nullable=False, server_default="customer"),
    Column("avatar_url", Text),
    Column("cnpj", Text),
    Column("phone", Text),
    Column("address_line1", Text),
    Column("address_line2", Text),
    Column("city", Text),
    Column("state", Text),
    Column("postal_code", Text),
    Column("country", Text),
    Column("created_at", DateTime(timezone=True)),
)

tickets = Table(
    "tickets",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("number", Integer, unique=True),
    Column("subject", Text, nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("status", String(16), nullable=False, server_default="open"),
    Column("priority", String(16), nullable=False, server_default="medium"),
    Column("requester_id", String(36), ForeignKey("profiles.id"), nullable=False),
    Column("assignee_id", String(36), ForeignKey("profiles.id")),
    Column("tags", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
)

ticket_messages = Table(
    "ticket_messages",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("ticket_id", String(36), ForeignKey("tickets.id"), nullable=False),
    Column("sender_id", String(36), ForeignKey("profiles.id"), nullable=False),
    Column("body", Text, nullable=False),
    Column("internal", Boolean, nullable=False, server_default=false()),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

email_settings = Table(
    "email_settings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("help_desk_name", Text),
    Column("from_name", Text),
    Column("from_address", Text),
    Column("imap_host", Text),
    Column("imap_port", Integer),
    Column("imap_username", Text),
    Column("imap_password", Text),
    Column("imap_use_ssl", Boolean),
    Column("smtp_host", Text),
    Column("smtp_port", Integer),
    Column("smtp_username", Text),
    Column("smtp_password", Text),
    Column("smtp_use_starttls", Boolean),
    Column("smart_filtering", Boolean),
    Column("blocked_domains", JSON),
    Column("blocked_keywords", JSON),
    Column("updated_at", DateTime(timezone=True)),
)
