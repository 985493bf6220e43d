"""
Shared Data Service connections.

The SQLAlchemy engine and the Supabase clients are created lazily and reused
across warm Lambda invocations.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool
from supabase import Client, create_client

from utils.config import get_config
from utils.error_handling import DataServiceError
from utils.logging_config import get_logger

logger = get_logger(__name__)

_engine: Optional[Engine] = None
_admin_client: Optional[Client] = None
_auth_client: Optional[Client] = None


def get_db_engine() -> Engine:
    """Get or create the SQLAlchemy engine with connection pooling."""
    global _engine
    if _engine is None:
        db_url = get_config().database_url
        if not db_url:
            raise DataServiceError("Database is not configured")
        _engine = create_engine(
            db_url,
            poolclass=QueuePool,
            pool_size=1,
            max_overflow=2,
            pool_pre_ping=True,
            pool_recycle=300,
        )
    return _engine


def get_admin_client() -> Client:
    """Supabase client holding the service-role key (admin API)."""
    global _admin_client
    if _admin_client is None:
        config = get_config()
        if not (config.supabase_url and config.supabase_service_role_key):
            raise DataServiceError("Supabase admin credentials are not configured")
        _admin_client = create_client(config.supabase_url, config.supabase_service_role_key)
    return _admin_client


def get_auth_client() -> Client:
    """
    Supabase client used for password sign-in.

    Kept apart from the admin client because signing in stores the user's
    session on the client it was called on.
    """
    global _auth_client
    if _auth_client is None:
        config = get_config()
        key = config.supabase_anon_key or config.supabase_service_role_key
        if not (config.supabase_url and key):
            raise DataServiceError("Supabase credentials are not configured")
        _auth_client = create_client(config.supabase_url, key)
    return _auth_client
