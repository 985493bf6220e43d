"""PostgreSQL repository base using SQLAlchemy Core."""

from typing import Any, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from utils.error_handling import DataServiceError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class PostgresRepository:
    """Thin wrapper to keep SQL organized and parameterized."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def fetch_one(self, query: str, params: Optional[dict] = None) -> Optional[dict]:
        """Execute a SELECT and return one row as dict."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(text(query), params or {}).fetchone()
                return dict(row._mapping) if row else None
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    def fetch_all(self, query: str, params: Optional[dict] = None) -> List[dict]:
        """Execute a SELECT and return every row as dict."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    def execute(self, query: str, params: Optional[dict] = None) -> Any:
        """Execute a parameterized statement in its own transaction; returns rowcount."""
        try:
            with self.engine.begin() as conn:
                return conn.execute(text(query), params or {}).rowcount
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    def _wrap(self, exc: SQLAlchemyError) -> DataServiceError:
        logger.error(
            "Database statement failed",
            extra={"repository": type(self).__name__, "error": str(exc.__class__.__name__)},
        )
        return DataServiceError(f"Database error: {exc.__class__.__name__}")
