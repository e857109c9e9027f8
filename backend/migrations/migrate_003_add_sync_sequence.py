"""
Migration: Add the write sequence used by sync pull.

This migration:
1. Adds sequence column (integer, default 0) to every record table
2. Numbers existing rows 1..n in id order, so they page through pull like new writes
3. Indexes the column
"""
import logging

from sqlalchemy import text

from migrations.columns import add_columns_if_missing, existing_columns

logger = logging.getLogger(__name__)

TABLES = ("employee", "time_record", "location", "department", "settings")


def migrate(conn):
    """Run migration."""
    for table in TABLES:
        added = add_columns_if_missing(conn, table, [("sequence", "INTEGER NOT NULL DEFAULT 0")])
        if not added and "sequence" not in existing_columns(conn, table):
            continue

        if added:
            logger.info(f"Backfilling {table}.sequence in id order...")
            conn.execute(text(f"""
                UPDATE {table}
                SET sequence = (
                    SELECT COUNT(*) FROM {table} AS earlier WHERE earlier.id <= {table}.id
                )
            """))

        logger.info(f"Creating index on {table}.sequence...")
        conn.execute(text(f"CREATE INDEX IF NOT EXISTS ix_{table}_sequence ON {table} (sequence)"))
