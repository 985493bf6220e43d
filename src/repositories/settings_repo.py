"""Email settings singleton row."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Optional

from models.email_settings import EmailSettings
from repositories.postgres_repo import PostgresRepository

SETTINGS_COLUMNS = (
    "help_desk_name",
    "from_name",
    "from_address",
    "imap_host",
    "imap_port",
    "imap_username",
    "imap_password",
    "imap_use_ssl",
    "smtp_host",
    "smtp_port",
    "smtp_username",
    "smtp_password",
    "smtp_use_starttls",
    "smart_filtering",
    "blocked_domains",
    "blocked_keywords",
)


class EmailSettingsRepository(PostgresRepository):
    """At most one row is expected; the first one wins."""

    def get(self) -> Optional[EmailSettings]:
        row = self.fetch_one(
            f"SELECT id, {', '.join(SETTINGS_COLUMNS)} FROM email_settings ORDER BY id LIMIT 1"
        )
        return EmailSettings.model_validate(row) if row else None

    def upsert(self, settings: EmailSettings) -> EmailSettings:
        """Update the row with this id in place; insert a fresh id when there is none."""
        params = {
            "help_desk_name": settings.help_desk_name,
            "from_name": settings.from_name,
            "from_address": settings.from_address,
            "imap_host": settings.imap_host,
            "imap_port": settings.imap_port,
            "imap_username": settings.imap_username,
            "imap_password": settings.secret("imap_password"),
            "imap_use_ssl": settings.imap_use_ssl,
            "smtp_host": settings.smtp_host,
            "smtp_port": settings.smtp_port,
            "smtp_username": settings.smtp_username,
            "smtp_password": settings.secret("smtp_password"),
            "smtp_use_starttls": settings.smtp_use_starttls,
            "smart_filtering": settings.smart_filtering,
            "blocked_domains": json.dumps(settings.blocked_domains),
            "blocked_keywords": json.dumps(settings.blocked_keywords),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        if settings.id:
            params["id"] = settings.id
            assignments = ", ".join(f"{c} = :{c}" for c in SETTINGS_COLUMNS + ("updated_at",))
            if self.execute(f"UPDATE email_settings SET {assignments} WHERE id = :id", params):
                return settings

        params["id"] = str(uuid.uuid4())
        columns = ("id",) + SETTINGS_COLUMNS + ("updated_at",)
        self.execute(
            f"INSERT INTO email_settings ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})",
            params,
        )
        return settings.model_copy(update={"id": params["id"]})
