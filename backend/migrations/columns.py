import logging

from sqlalchemy import inspect, text

logger = logging.getLogger(__name__)


def existing_columns(conn, table: str) -> set[str]:
    inspector = inspect(conn)
    if not inspector.has_table(table):
        return set()
    return {col["name"] for col in inspector.get_columns(table)}


def add_columns_if_missing(conn, table: str, columns: list[tuple[str, str]]) -> int:
    """Add each (name, ddl) column that the table lacks. Returns how many were added."""
    present = existing_columns(conn, table)
    if not present:
        logger.info(f"{table} table does not exist, skipping")
        return 0

    added = 0
    for name, ddl in columns:
        if name in present:
            logger.info(f"{table}.{name} already exists, skipping")
            continue
        logger.info(f"Adding {table}.{name} column...")
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
        added += 1
    return added
