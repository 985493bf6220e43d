"""
Email channel settings, spam rules and connection checks.

The settings record is a singleton: it is created on first save and
updated in place afterwards.
"""

from __future__ import annotations

import smtplib
from typing import Mapping, Optional

from imap_tools import MailBox, MailBoxUnencrypted
from pydantic import BaseModel

from models.email_settings import EmailSettings
from repositories.settings_repo import EmailSettingsRepository
from utils.logging_config import get_logger
from utils.validators import email_domain

logger = get_logger(__name__)

CONNECTION_TIMEOUT_SECONDS = 10


class ConnectionTestResult(BaseModel):
    """Outcome of probing the IMAP and SMTP servers."""

    imap_ok: bool
    smtp_ok: bool
    imap_error: Optional[str] = None
    smtp_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.imap_ok and self.smtp_ok


def is_blocked(
    settings: EmailSettings,
    sender: str,
    subject: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return why an inbound email should not become a ticket, or None."""
    domain = email_domain(sender)
    for blocked in settings.blocked_domains:
        if domain == blocked or domain.endswith("." + blocked):
            return f"blocked domain: {blocked}"

    lowered_subject = (subject or "").lower()
    for keyword in settings.blocked_keywords:
        if keyword in lowered_subject:
            return f"blocked keyword: {keyword}"

    if settings.smart_filtering and headers:
        if any(name.lower() == "list-unsubscribe" for name in headers):
            return "marketing header: List-Unsubscribe"
    return None


class EmailSettingsService:
    """Read/save the singleton and test mail server logins."""

    def __init__(self, repository: EmailSettingsRepository):
        self.repository = repository

    def get_settings(self) -> EmailSettings:
        return self.repository.get() or EmailSettings()

    def save_settings(self, incoming: EmailSettings) -> EmailSettings:
        stored = self.repository.get()
        merged = self._merge_passwords(incoming, stored)
        saved = self.repository.upsert(merged)
        logger.info("Email settings saved", extra={"settings_id": saved.id})
        return saved

    def test_connection(self, candidate: Optional[EmailSettings] = None) -> ConnectionTestResult:
        """Log in to IMAP and SMTP; failures are reported, never raised."""
        settings = self._merge_passwords(candidate, self.repository.get()) if candidate else self.get_settings()
        imap_error = self._try_imap_login(settings)
        smtp_error = self._try_smtp_login(settings)
        result = ConnectionTestResult(
            imap_ok=imap_error is None,
            smtp_ok=smtp_error is None,
            imap_error=imap_error,
            smtp_error=smtp_error,
        )
        logger.info(
            "Email connection tested",
            extra={"imap_ok": result.imap_ok, "smtp_ok": result.smtp_ok},
        )
        return result

    @staticmethod
    def _merge_passwords(
        incoming: EmailSettings, stored: Optional[EmailSettings]
    ) -> EmailSettings:
        """Blank passwords keep the stored ones; only the stored id is ever reused."""
        if stored is None:
            return incoming.model_copy(update={"id": None})
        update = {"id": stored.id}
        if incoming.imap_password is None:
            update["imap_password"] = stored.imap_password
        if incoming.smtp_password is None:
            update["smtp_password"] = stored.smtp_password
        return incoming.model_copy(update=update)

    @staticmethod
    def _try_imap_login(settings: EmailSettings) -> Optional[str]:
        mailbox_cls = MailBox if settings.imap_use_ssl else MailBoxUnencrypted
        try:
            mailbox = mailbox_cls(
                settings.imap_host,
                port=settings.imap_port,
                timeout=CONNECTION_TIMEOUT_SECONDS,
            )
            with mailbox.login(
                settings.imap_username or settings.from_address,
                settings.secret("imap_password") or "",
                initial_folder="INBOX",
            ):
                pass
        except Exception as exc:
            logger.warning("IMAP connection failed", extra={"host": settings.imap_host})
            return str(exc) or exc.__class__.__name__
        return None

    @staticmethod
    def _try_smtp_login(settings: EmailSettings) -> Optional[str]:
        try:
            with smtplib.SMTP(
                settings.smtp_host, settings.smtp_port, timeout=CONNECTION_TIMEOUT_SECONDS
            ) as client:
                if settings.smtp_use_starttls:
                    client.starttls()
                client.login(
                    settings.smtp_username or settings.from_address,
                    settings.secret("smtp_password") or "",
                )
        except Exception as exc:
            logger.warning("SMTP connection failed", extra={"host": settings.smtp_host})
            return str(exc) or exc.__class__.__name__
        return None
