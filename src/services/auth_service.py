"""Session lifecycle: sign-in, token resolution and sign-out."""

from __future__ import annotations

from typing import Optional

from models.profile import Role
from models.session import SessionContext
from repositories.identity_repo import IdentityRepository, IdentityUser
from repositories.profile_repo import ProfileRepository
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)


class AuthService:
    """Build SessionContext objects from Data Service identities and profiles."""

    def __init__(
        self,
        identities: IdentityRepository,
        profiles: ProfileRepository,
        default_language: str = "pt-br",
    ):
        self.identities = identities
        self.profiles = profiles
        self.default_language = default_language

    def sign_in(self, email: str, password: str, language: Optional[str] = None) -> SessionContext:
        ensure_present(email, "email")
        ensure_present(password, "password")

        tokens = self.identities.sign_in(email.strip().lower(), password)
        session = self._build_session(
            tokens.user, tokens.access_token, tokens.refresh_token, language
        )
        logger.info("User signed in", extra={"user_id": session.user_id, "role": session.role.value})
        return session

    def resolve_session(self, access_token: str, language: Optional[str] = None) -> SessionContext:
        ensure_present(access_token, "access token")
        user = self.identities.get_user(access_token)
        return self._build_session(user, access_token, None, language)

    def sign_out(self, session: SessionContext) -> None:
        self.identities.sign_out(session.access_token)
        logger.info("User signed out", extra={"user_id": session.user_id})

    def _build_session(
        self,
        user: IdentityUser,
        access_token: str,
        refresh_token: Optional[str],
        language: Optional[str],
    ) -> SessionContext:
        profile = self.profiles.get(user.user_id)
        return SessionContext(
            user_id=user.user_id,
            email=(profile.email if profile else None) or user.email,
            full_name=(profile.full_name if profile else None) or user.metadata.get("full_name"),
            role=profile.role if profile else Role.CUSTOMER,
            access_token=access_token,
            refresh_token=refresh_token,
            language=language or self.default_language,
        )
