"""Custom exceptions and helpers for consistent error responses."""

import functools
import json
import uuid
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from utils.logging_config import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=400)


class AuthenticationError(AppError):
    """Raised when the caller has no valid session."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401)


class PermissionDeniedError(AppError):
    """Raised when the session role may not perform the action."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, status_code=403)


class NotFoundError(AppError):
    """Raised when a requested resource is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class DataServiceError(AppError):
    """Raised when the hosted database or auth API fails."""

    def __init__(self, message: str = "Data service unavailable"):
        super().__init__(message, status_code=502)


class ProvisioningError(AppError):
    """
    Raised when one step of agent provisioning fails.

    ``step`` names the write that failed ("identity" or "profile").
    ``orphaned_identity_id`` is set when an auth identity was left behind
    and must be reconciled out of band.
    """

    def __init__(
        self,
        message: str,
        *,
        step: str,
        status_code: int = 400,
        rolled_back: bool = False,
        orphaned_identity_id: Optional[str] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.step = step
        self.rolled_back = rolled_back
        self.orphaned_identity_id = orphaned_identity_id

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.orphaned_identity_id:
            body["orphaned_identity_id"] = self.orphaned_identity_id
        return body


def json_response(status: int, body: Any) -> Dict[str, Any]:
    """Format a JSON API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": body if isinstance(body, str) else json.dumps(body, default=str),
    }


def to_response(error: AppError) -> Dict[str, Any]:
    """Convert an AppError into a Lambda proxy integration response."""
    return json_response(error.status_code, error.to_body())


def validation_message(exc: PydanticValidationError) -> str:
    """First pydantic error as a short, client-facing sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    if first.get("type") == "missing":
        return f"{field} is required"
    message = first.get("msg") or "Invalid input"
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


def handle_errors(operation: str) -> Callable:
    """
    Wrap a Lambda handler so every failure becomes a JSON error response.

    AppError keeps its status, pydantic errors become 400 and anything else
    is logged with a correlation id and returned as 500.
    """

    def decorator(handler: Callable) -> Callable:
        @functools.wraps(handler)
        def wrapper(event, context, *args, **kwargs):
            try:
                return handler(event, context, *args, **kwargs)
            except AppError as exc:
                return to_response(exc)
            except PydanticValidationError as exc:
                return json_response(400, {"error": validation_message(exc)})
            except Exception:
                correlation_id = str(uuid.uuid4())
                logger.exception(
                    f"{operation} failed", extra={"correlation_id": correlation_id}
                )
                return json_response(
                    500, {"error": "Internal server error", "correlation_id": correlation_id}
                )

        return wrapper

    return decorator
