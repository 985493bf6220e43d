"""Profiles collection (customers, agents and admins)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from models.profile import Profile
from repositories.postgres_repo import PostgresRepository

PROFILE_COLUMNS = (
    "id",
    "full_name",
    "email",
    "role",
    "avatar_url",
    "cnpj",
    "phone",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "country",
    "created_at",
)
UPDATABLE_COLUMNS = frozenset(PROFILE_COLUMNS) - {"id", "created_at"}

_SELECT = f"SELECT {', '.join(PROFILE_COLUMNS)} FROM profiles"


class ProfileRepository(PostgresRepository):
    """CRUD over the profiles table."""

    def get(self, profile_id: str) -> Optional[Profile]:
        row = self.fetch_one(f"{_SELECT} WHERE id = :id", {"id": profile_id})
        return Profile.model_validate(row) if row else None

    def list_by_roles(self, roles: Iterable[str]) -> List[Profile]:
        """Profiles with any of the given roles, ordered by name."""
        role_values = [str(getattr(r, "value", r)) for r in roles]
        placeholders = ", ".join(f":role_{i}" for i in range(len(role_values)))
        params = {f"role_{i}": role for i, role in enumerate(role_values)}
        rows = self.fetch_all(
            f"{_SELECT} WHERE role IN ({placeholders}) ORDER BY full_name ASC",
            params,
        )
        return [Profile.model_validate(row) for row in rows]

    def create(self, profile: Profile) -> Profile:
        data = profile.model_dump(mode="json")
        data["created_at"] = (profile.created_at or datetime.now(timezone.utc)).isoformat()
        columns = ", ".join(PROFILE_COLUMNS)
        values = ", ".join(f":{c}" for c in PROFILE_COLUMNS)
        self.execute(
            f"INSERT INTO profiles ({columns}) VALUES ({values})",
            {c: data.get(c) for c in PROFILE_COLUMNS},
        )
        return Profile.model_validate(data)

    def update(self, profile_id: str, changes: Dict[str, Any]) -> int:
        """Write the given columns; unknown column names are rejected."""
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update profile columns: {sorted(unknown)}")
        if not changes:
            return 0
        assignments = ", ".join(f"{c} = :{c}" for c in changes)
        params = {c: getattr(v, "value", v) for c, v in changes.items()}
        params["id"] = profile_id
        return self.execute(f"UPDATE profiles SET {assignments} WHERE id = :id", params)

    def delete(self, profile_id: str) -> int:
        return self.execute("DELETE FROM profiles WHERE id = :id", {"id": profile_id})
