"""
Auth identities held by the Data Service (Supabase Auth).

Admin operations use the service-role client; password sign-in uses a
separate client so the admin client never carries a user session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from supabase import AuthError, Client

from utils.error_handling import AuthenticationError, DataServiceError
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class IdentityUser:
    """The auth-side view of a user."""

    user_id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthTokens:
    """Tokens issued by a successful sign-in."""

    user: IdentityUser
    access_token: str
    refresh_token: Optional[str] = None


def _to_identity(user: Any) -> IdentityUser:
    return IdentityUser(
        user_id=str(user.id),
        email=getattr(user, "email", None),
        metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


class IdentityRepository:
    """Wrap the Supabase auth APIs behind plain methods and app errors."""

    def __init__(self, admin_client: Client, auth_client: Optional[Client] = None):
        self.admin_client = admin_client
        self.auth_client = auth_client or admin_client

    def create_identity(self, email: str, full_name: str, role: str) -> str:
        """Create an unconfirmed login identity; returns its id."""
        try:
            response = self.admin_client.auth.admin.create_user(
                {
                    "email": email,
                    "email_confirm": False,
                    "user_metadata": {"full_name": full_name, "role": role},
                }
            )
        except Exception as exc:
            logger.warning("Auth identity creation failed", extra={"error": str(exc)})
            raise DataServiceError(str(exc) or "Failed to create auth identity") from exc

        user = getattr(response, "user", None)
        if user is None:
            raise DataServiceError("Failed to create auth identity")
        return str(user.id)

    def delete_identity(self, user_id: str) -> None:
        try:
            self.admin_client.auth.admin.delete_user(user_id)
        except Exception as exc:
            logger.warning(
                "Auth identity deletion failed",
                extra={"user_id": user_id, "error": str(exc)},
            )
            raise DataServiceError(str(exc) or "Failed to delete auth identity") from exc

    def sign_in(self, email: str, password: str) -> AuthTokens:
        try:
            response = self.auth_client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthenticationError("Invalid email or password") from exc
        except Exception as exc:
            raise DataServiceError("Sign-in is unavailable") from exc

        session = getattr(response, "session", None)
        if response.user is None or session is None:
            raise AuthenticationError("Invalid email or password")
        return AuthTokens(
            user=_to_identity(response.user),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )

    def get_user(self, access_token: str) -> IdentityUser:
        """Resolve the user behind an access token."""
        try:
            response = self.admin_client.auth.get_user(access_token)
        except AuthError as exc:
            raise AuthenticationError("Session expired or invalid") from exc
        except Exception as exc:
            raise DataServiceError("Session lookup is unavailable") from exc

        if response is None or response.user is None:
            raise AuthenticationError("Session expired or invalid")
        return _to_identity(response.user)

    def sign_out(self, access_token: str) -> None:
        """Revoke the session that issued the access token."""
        try:
            self.admin_client.auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise AuthenticationError("Session expired or invalid") from exc
        except Exception as exc:
            raise DataServiceError("Sign-out is unavailable") from exc

    def send_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            self.auth_client.auth.reset_password_for_email(email, options)
        except Exception as exc:
            logger.warning("Password reset email failed", extra={"error": str(exc)})
            raise DataServiceError("Could not send the password reset email") from exc
