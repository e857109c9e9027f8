"""
Migration: Add temp-worker fields to employee.

Older kiosks only knew permanent staff. This adds:
1. is_temp (boolean, default false)
2. temp_agency (nullable text)
"""

from migrations.columns import add_columns_if_missing


def migrate(conn):
    """Run migration."""
    add_columns_if_missing(
        conn,
        "employee",
        [
            ("is_temp", "BOOLEAN NOT NULL DEFAULT FALSE"),
            ("temp_agency", "VARCHAR"),
        ],
    )
