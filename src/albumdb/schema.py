"""
Creates the albums table if it does not already exist.

Run this module directly to initialize a fresh database:
    python -m albumdb.schema
"""

import psycopg

from albumdb.db import Database
from albumdb.errors import SchemaError
from albumdb.log import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS albums (
    id      BIGSERIAL PRIMARY KEY,
    title   TEXT NOT NULL,
    artist  TEXT NOT NULL,
    score   NUMERIC NOT NULL CHECK (score >= 0 AND score <= 10)
);
"""


def ensure_schema(db: Database) -> None:
    """
    Execute the schema SQL.
    Safe to call multiple times (uses IF NOT EXISTS).

    Raises:
        SchemaError: if the statement fails
    """
    try:
        db.execute(SCHEMA_SQL)
    except psycopg.Error as e:
        raise SchemaError(f"ensure_schema: {e}") from e
    logger.info("Database schema initialized.")


if __name__ == "__main__":
    from albumdb.config import config
    from albumdb.db import await_ready, connect
    from albumdb.log import configure_logging

    configure_logging()
    with connect(config.database_url) as db:
        await_ready(db, interval=config.probe_interval)
        ensure_schema(db)
