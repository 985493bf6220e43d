"""
Email settings tests: spam rules, password handling and connection checks.

Mail servers are patched; nothing leaves the process.

Run with: pytest tests/unit/test_email_settings.py -v
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from handlers import email_settings as settings_handler
from models.email_settings import EmailSettings
from models.profile import Role
from services.email_settings_service import EmailSettingsService, is_blocked


@pytest.fixture
def settings():
    return EmailSettings(
        blocked_domains=["Marketing.com"],
        blocked_keywords=["Newsletter"],
        smart_filtering=True,
    )


class TestSpamRules:
    def test_blocked_domain_and_subdomain(self, settings):
        assert is_blocked(settings, "promo@marketing.com") == "blocked domain: marketing.com"
        assert is_blocked(settings, "Deals <deals@mail.MARKETING.com>") == "blocked domain: marketing.com"
        assert is_blocked(settings, "someone@notmarketing.com") is None

    def test_keyword_is_case_insensitive(self, settings):
        assert is_blocked(settings, "a@client.com", "Our June NEWSLETTER") == "blocked keyword: newsletter"

    def test_list_unsubscribe_needs_smart_filtering(self, settings):
        headers = {"list-unsubscribe": "<mailto:unsub@client.com>"}
        assert is_blocked(settings, "a@client.com", "Hello", headers) is not None
        relaxed = settings.model_copy(update={"smart_filtering": False})
        assert is_blocked(relaxed, "a@client.com", "Hello", headers) is None

    def test_regular_mail_passes(self, settings):
        assert is_blocked(settings, "customer@client.com", "Printer broken", {"Subject": "x"}) is None


class TestEmailSettingsModel:
    def test_passwords_are_masked(self):
        dumped = json.loads(EmailSettings(smtp_password="hunter2").model_dump_json())
        assert dumped["smtp_password"] == "********"
        assert dumped["imap_password"] is None

    def test_echoed_mask_counts_as_blank(self):
        assert EmailSettings(imap_password="********").imap_password is None

    def test_defaults(self):
        settings = EmailSettings()
        assert (settings.imap_port, settings.smtp_port) == (993, 587)
        assert "newsletter" in settings.blocked_keywords

    def test_lists_accept_json_strings(self):
        settings = EmailSettings(blocked_domains='["A.com", "a.com", " b.com "]')
        assert settings.blocked_domains == ["a.com", "b.com"]


class TestEmailSettingsService:
    def test_get_defaults_when_nothing_stored(self):
        repo = MagicMock()
        repo.get.return_value = None
        assert EmailSettingsService(repo).get_settings() == EmailSettings()

    def test_blank_password_keeps_stored_one(self):
        repo = MagicMock()
        repo.get.return_value = EmailSettings(id="s-1", imap_password="old-imap", smtp_password="old-smtp")
        repo.upsert.side_effect = lambda s: s

        saved = EmailSettingsService(repo).save_settings(
            EmailSettings(imap_password="", smtp_password="new-smtp", from_name="Acme")
        )

        assert saved.id == "s-1"
        assert saved.secret("imap_password") == "old-imap"
        assert saved.secret("smtp_password") == "new-smtp"
        assert saved.from_name == "Acme"

    @patch("services.email_settings_service.smtplib.SMTP")
    @patch("services.email_settings_service.MailBox")
    def test_connection_success(self, mock_mailbox, mock_smtp):
        repo = MagicMock()
        repo.get.return_value = EmailSettings(imap_password="p1", smtp_password="p2", smtp_username="desk")

        result = EmailSettingsService(repo).test_connection()

        assert result.ok
        mock_mailbox.return_value.login.assert_called_once()
        client = mock_smtp.return_value.__enter__.return_value
        client.starttls.assert_called_once()
        client.login.assert_called_once_with("desk", "p2")

    @patch("services.email_settings_service.smtplib.SMTP")
    @patch("services.email_settings_service.MailBox")
    def test_connection_failures_are_reported_not_raised(self, mock_mailbox, mock_smtp):
        repo = MagicMock()
        repo.get.return_value = None
        mock_mailbox.return_value.login.side_effect = OSError("connection refused")
        mock_smtp.side_effect = OSError("timed out")

        result = EmailSettingsService(repo).test_connection(EmailSettings())

        assert not result.ok
        assert result.imap_error == "connection refused"
        assert result.smtp_error == "timed out"


class TestEmailSettingsHandlers:
    def test_get_never_exposes_passwords(self, monkeypatch, auth_as, api_event):
        auth_as(Role.AGENT)
        service = MagicMock()
        service.get_settings.return_value = EmailSettings(imap_password="secret")
        monkeypatch.setattr(settings_handler, "_settings_service", service)

        resp = settings_handler.get_handler(api_event("GET", "/api/settings/email"), None)

        assert resp["statusCode"] == 200
        assert "secret" not in resp["body"]

    def test_agents_cannot_save(self, monkeypatch, auth_as, api_event):
        auth_as(Role.AGENT)
        service = MagicMock()
        monkeypatch.setattr(settings_handler, "_settings_service", service)

        resp = settings_handler.save_handler(api_event("PUT", "/api/settings/email", body={}), None)

        assert resp["statusCode"] == 403
        service.save_settings.assert_not_called()
