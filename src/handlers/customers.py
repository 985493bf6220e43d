"""Handlers for GET/POST /api/customers."""

from typing import Optional

from models.profile import CustomerCreate
from utils.auth_guard import STAFF, require_session
from utils.error_handling import handle_errors, json_response
from utils.http import parse_body, query_params
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Lazy-loaded service to avoid import-time DB connections
_customer_service: Optional["CustomerService"] = None


def _get_customer_service():
    """Lazy-load CustomerService."""
    global _customer_service
    if _customer_service is None:
        from services.factory import build_customer_service
        _customer_service = build_customer_service()
    return _customer_service


@handle_errors("Customer listing")
@require_session(STAFF)
def list_handler(event, context, session):
    """Customers ordered by name; ``search`` filters name/email/CNPJ/city."""
    customers = _get_customer_service().list_customers(query_params(event).get("search"))
    return json_response(
        200, {"customers": [c.model_dump(mode="json") for c in customers]}
    )


@handle_errors("Customer creation")
@require_session(STAFF)
def create_handler(event, context, session):
    payload = CustomerCreate.model_validate(parse_body(event))
    customer = _get_customer_service().create_customer(payload)
    logger.info("Customer registered", extra={"customer_id": customer.id, "by": session.user_id})
    return json_response(200, customer.model_dump(mode="json"))
