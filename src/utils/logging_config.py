"""Structured logger setup shared across handlers and services."""

import logging
import os

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "helpdesk-api"
REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset(
    {"password", "imap_password", "smtp_password", "access_token", "refresh_token", "authorization"}
)


class RedactSecretsFilter(logging.Filter):
    """Mask credential-looking keys passed through ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in SENSITIVE_KEYS & set(vars(record)):
            setattr(record, key, REDACTED)
        return True


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    Context such as correlation ids and ticket ids goes in ``extra`` so it
    lands as top-level keys in CloudWatch.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(levelname)s %(name)s %(message)s %(asctime)s",
        rename_fields={"levelname": "level", "asctime": "timestamp"},
        static_fields={"service": SERVICE_NAME},
    )
    handler.setFormatter(formatter)
    handler.addFilter(RedactSecretsFilter())
    logger.addHandler(handler)
    logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    logger.propagate = False
    return logger
