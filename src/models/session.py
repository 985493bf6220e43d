"""Per-request session context."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from models.profile import Role, STAFF_ROLES


class SessionContext(BaseModel):
    """
    The authenticated caller for one request.

    Created by sign-in or by resolving a bearer token, passed explicitly to
    handlers and services, and discarded on sign-out.
    """

    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Role = Role.CUSTOMER
    access_token: str = Field(repr=False, exclude=True)
    refresh_token: Optional[str] = Field(default=None, repr=False, exclude=True)
    language: str = "pt-br"
    theme: str = "light"
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def has_role(self, roles: Optional[Iterable[Role]]) -> bool:
        return roles is None or self.role in set(roles)
