"""
Customer directory.

Customers are profiles with role ``customer``. Creating one only writes the
profile row; no login identity is provisioned for customers.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from models.profile import CustomerCreate, Profile, Role
from repositories.profile_repo import ProfileRepository
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _matches(profile: Profile, needle: str) -> bool:
    haystack = (profile.full_name, profile.email, profile.cnpj, profile.city)
    return any(needle in (value or "").lower() for value in haystack)


class CustomerService:
    """Service for customer listing and creation."""

    def __init__(self, profiles: ProfileRepository):
        self.profiles = profiles

    def list_customers(self, search: Optional[str] = None) -> List[Profile]:
        """Customers ordered by name, optionally filtered by name/email/CNPJ/city."""
        customers = self.profiles.list_by_roles([Role.CUSTOMER])
        needle = (search or "").strip().lower()
        if not needle:
            return customers
        return [c for c in customers if _matches(c, needle)]

    def create_customer(self, payload: CustomerCreate) -> Profile:
        profile = Profile(id=str(uuid.uuid4()), role=Role.CUSTOMER, **payload.model_dump())
        created = self.profiles.create(profile)
        logger.info("Customer created", extra={"customer_id": created.id})
        return created
