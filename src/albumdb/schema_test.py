"""
Integration tests for ensure_schema().

Run with: ALBUMDB_ENV=test pytest src/albumdb/schema_test.py -v
"""
from unittest.mock import MagicMock

import psycopg
import pytest

from albumdb.errors import SchemaError
from albumdb.schema import ensure_schema


class TestEnsureSchema:
    """Tests for ensure_schema()"""

    def test_ensure_schema_is_idempotent(self, db, db_connection):
        ensure_schema(db)
        ensure_schema(db)

        count = db_connection.execute(
            "SELECT count(*) FROM information_schema.tables WHERE table_name = 'albums'"
        ).fetchone()[0]
        assert count == 1

    def test_ensure_schema_columns(self, db, db_connection):
        ensure_schema(db)

        columns = db_connection.execute(
            """
            SELECT column_name, is_nullable
            FROM information_schema.columns
            WHERE table_name = 'albums'
            ORDER BY ordinal_position
            """
        ).fetchall()
        assert columns == [
            ("id", "NO"),
            ("title", "NO"),
            ("artist", "NO"),
            ("score", "NO"),
        ]

    def test_ensure_schema_failure_raises_schema_error(self):
        db = MagicMock()
        db.execute.side_effect = psycopg.OperationalError("server closed the connection")

        with pytest.raises(SchemaError, match="server closed the connection"):
            ensure_schema(db)
