"""Lightweight health check handler."""

import os
from datetime import datetime, timezone

from utils.error_handling import json_response


def lambda_handler(event, context):
    """Return a 200 without touching the database or the auth API."""
    return json_response(
        200,
        {
            "status": "ok",
            "service": "helpdesk-api",
            "environment": os.environ.get("ENVIRONMENT", "dev"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
