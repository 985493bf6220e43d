"""Team members (agents and admins) and the caller's own profile."""

from __future__ import annotations

from typing import List, Optional

from models.profile import Profile, ProfileUpdate, RoleUpdate, STAFF_ROLES
from models.session import SessionContext
from repositories.identity_repo import IdentityRepository
from repositories.profile_repo import ProfileRepository
from utils.error_handling import NotFoundError, ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class TeamService:
    """Team listing, role changes, password resets and profile edits."""

    def __init__(
        self,
        profiles: ProfileRepository,
        identities: IdentityRepository,
        password_reset_redirect_url: Optional[str] = None,
    ):
        self.profiles = profiles
        self.identities = identities
        self.password_reset_redirect_url = password_reset_redirect_url

    def list_team(self) -> List[Profile]:
        return self.profiles.list_by_roles(STAFF_ROLES)

    def update_role(self, member_id: str, update: RoleUpdate) -> Profile:
        member = self._get_member(member_id)
        self.profiles.update(member.id, {"role": update.role.value})
        logger.info("Team role changed", extra={"member_id": member.id, "role": update.role.value})
        return self.profiles.get(member.id)

    def send_password_reset(self, member_id: str) -> None:
        member = self._get_member(member_id)
        if not member.email:
            raise ValidationError("This team member has no email address")
        self.identities.send_password_reset(member.email, self.password_reset_redirect_url)
        logger.info("Password reset requested", extra={"member_id": member.id})

    def update_own_profile(self, session: SessionContext, update: ProfileUpdate) -> Profile:
        changes = {"full_name": update.full_name, "avatar_url": update.avatar_url}
        if self.profiles.update(session.user_id, changes) == 0:
            raise NotFoundError("Profile not found")
        return self.profiles.get(session.user_id)

    def _get_member(self, member_id: str) -> Profile:
        member = self.profiles.get(member_id)
        if member is None or not member.is_staff:
            raise NotFoundError("Team member not found")
        return member
