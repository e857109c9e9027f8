"""Ordered schema migrations, applied once each at startup.

Every step is idempotent (it checks for the column before adding it), runs
in its own transaction, and is recorded in schema_migrations.
"""
import logging
from datetime import UTC, datetime

from sqlalchemy import text

from migrations.migrate_001_add_employee_temp_columns import migrate as migrate_001
from migrations.migrate_002_add_settings_kiosk_columns import migrate as migrate_002
from migrations.migrate_003_add_sync_sequence import migrate as migrate_003

logger = logging.getLogger(__name__)

MIGRATIONS = [
    (1, "add_employee_temp_columns", migrate_001),
    (2, "add_settings_kiosk_columns", migrate_002),
    (3, "add_sync_sequence", migrate_003),
]


def applied_versions(engine) -> set[int]:
    with engine.begin() as conn:
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                name VARCHAR(100) NOT NULL,
                applied_at VARCHAR(40) NOT NULL
            )
        """))
        result = conn.execute(text("SELECT version FROM schema_migrations"))
        return {row[0] for row in result.fetchall()}


def run_migrations(engine) -> list[int]:
    """Apply pending migrations in order. Returns the versions applied."""
    done = applied_versions(engine)
    applied = []

    for version, name, step in MIGRATIONS:
        if version in done:
            continue

        logger.info(f"Running migration {version:03d} ({name})...")
        with engine.connect() as conn:
            trans = conn.begin()
            try:
                step(conn)
                conn.execute(
                    text("""
                        INSERT INTO schema_migrations (version, name, applied_at)
                        VALUES (:version, :name, :applied_at)
                    """),
                    {"version": version, "name": name, "applied_at": datetime.now(UTC).isoformat()},
                )
                trans.commit()
            except Exception as e:
                trans.rollback()
                logger.error(f"Migration {version:03d} failed: {str(e)}")
                raise
        logger.info(f"Migration {version:03d} completed successfully")
        applied.append(version)

    return applied
