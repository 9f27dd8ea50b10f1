# PostgresRowSource
# Pulls the flat discrepancy rows from the read-only warehouse.

from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from config import (
    DB_CONNECT_TIMEOUT, DB_HOST, DB_NAME, DB_PASSWORD, DB_POOL_SIZE,
    DB_PORT, DB_SSL, DB_USER,
)
from data_sources.discrepancy_query import DISCREPANCY_SQL
from reconciliation.errors import SourceUnavailableError
from utils.logger import log_source_call, log_source_result


def build_engine(
    host: str = DB_HOST,
    port: int = DB_PORT,
    database: str = DB_NAME,
    user: str = DB_USER,
    password: str = DB_PASSWORD,
    ssl: bool = DB_SSL,
) -> Engine:
    """Create a pooled engine for the warehouse."""
    url = URL.create(
        "postgresql+psycopg2",
        username=user or None,
        password=password or None,
        host=host,
        port=port,
        database=database or None,
    )
    connect_args = {"connect_timeout": DB_CONNECT_TIMEOUT}
    if ssl:
        connect_args["sslmode"] = "require"
    return create_engine(
        url,
        pool_size=DB_POOL_SIZE,
        pool_pre_ping=True,
        connect_args=connect_args,
        future=True,
    )


class PostgresRowSource:
    """
    Bulk row source backed by the warehouse.

    Every pull runs in a read-only session and returns rows keyed by the
    display-style column names of the discrepancy query.
    """

    name = "postgres.discrepancy_query"

    def __init__(self, engine: Optional[Engine] = None, sql: str = DISCREPANCY_SQL):
        self._engine = engine
        self.sql = sql

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine()
        return self._engine

    def fetch_rows(self) -> List[Dict[str, Any]]:
        log_source_call(self.name, host=DB_HOST or "(engine)", database=DB_NAME)
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY"))
                result = conn.execute(text(self.sql))
                rows = [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            log_source_result(self.name, False, f"{type(e).__name__}: {e}")
            raise SourceUnavailableError(f"Discrepancy query failed: {e}") from e

        log_source_result(self.name, True, f"rows: {len(rows)}")
        return rows


def create_row_source() -> Optional[PostgresRowSource]:
    """Return a warehouse source when one is configured."""
    if not DB_HOST:
        return None
    return PostgresRowSource()
