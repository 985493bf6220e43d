"""Email channel settings (singleton record) and spam rules."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, Field, SecretStr, field_serializer, field_validator

DEFAULT_BLOCKED_DOMAINS = ["news.marketing.com", "promo.store.com", "no-reply.service.net"]
DEFAULT_BLOCKED_KEYWORDS = ["newsletter", "promotion", "discount", "offer", "sale"]
PASSWORD_MASK = "********"


def _normalize_list(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    seen = []
    for item in value:
        cleaned = str(item).strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class EmailSettings(BaseModel):
    """Outbound identity, IMAP/SMTP connection and spam filter lists."""

    id: Optional[str] = None
    help_desk_name: str = "HelpDesk Pro Support"
    from_name: str = "HelpDesk Pro Support"
    from_address: str = "support@company.com"

    imap_host: str = "imap.gmail.com"
    imap_port: int = Field(default=993, ge=1, le=65535)
    imap_username: Optional[str] = None
    imap_password: Optional[SecretStr] = None
    imap_use_ssl: bool = True

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_username: Optional[str] = None
    smtp_password: Optional[SecretStr] = None
    smtp_use_starttls: bool = True

    smart_filtering: bool = True
    blocked_domains: List[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_DOMAINS))
    blocked_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_KEYWORDS))

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return str(value) if value is not None else value

    @field_validator("blocked_domains", "blocked_keywords", mode="before")
    @classmethod
    def normalize_lists(cls, value):
        return _normalize_list(value)

    @field_validator("imap_password", "smtp_password", mode="before")
    @classmethod
    def blank_password_to_none(cls, value):
        if value is None:
            return None
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        cleaned = str(value).strip()
        return None if not cleaned or cleaned == PASSWORD_MASK else value

    @field_validator("imap_use_ssl", "smtp_use_starttls", "smart_filtering", mode="before")
    @classmethod
    def coerce_flags(cls, value):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    @field_serializer("imap_password", "smtp_password")
    def mask_password(self, value: Optional[SecretStr]) -> Optional[str]:
        return PASSWORD_MASK if value else None

    def secret(self, field: str) -> Optional[str]:
        """Return a password in clear text for connection use only."""
        value = getattr(self, field)
        return value.get_secret_value() if value else None
