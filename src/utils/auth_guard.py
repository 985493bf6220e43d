"""Bearer-token route guard for the API handlers."""

import functools
from typing import Callable, Iterable, Optional

from models.profile import Role
from utils.error_handling import AuthenticationError, PermissionDeniedError, to_response
from utils.http import bearer_token, header
from utils.logging_config import get_logger

logger = get_logger(__name__)

STAFF = (Role.AGENT, Role.ADMIN)
ADMIN = (Role.ADMIN,)

# Lazy-loaded service to avoid import-time connections
_auth_service = None


def _get_auth_service():
    global _auth_service
    if _auth_service is None:
        from services.factory import build_auth_service

        _auth_service = build_auth_service()
    return _auth_service


def require_session(roles: Optional[Iterable[Role]] = None) -> Callable:
    """
    Resolve the caller's session before running ``handler(event, context, session)``.

    A missing or invalid token returns 401; a role outside ``roles`` returns 403.
    """
    allowed = tuple(roles) if roles is not None else None

    def decorator(handler: Callable) -> Callable:
        @functools.wraps(handler)
        def wrapper(event, context):
            token = bearer_token(event)
            if not token:
                return to_response(AuthenticationError())

            session = _get_auth_service().resolve_session(token, header(event, "X-Language"))
            if not session.has_role(allowed):
                logger.info(
                    "Route denied for role",
                    extra={"user_id": session.user_id, "role": session.role.value},
                )
                return to_response(PermissionDeniedError())
            return handler(event, context, session)

        return wrapper

    return decorator
