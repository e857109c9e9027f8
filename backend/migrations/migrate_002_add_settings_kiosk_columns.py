"""
Migration: Add kiosk behaviour fields to settings.

Adds the screen saver toggle, the clock format and the per-screen
inactivity timeouts (seconds) with the same defaults new installs get.
"""

from migrations.columns import add_columns_if_missing


def migrate(conn):
    """Run migration."""
    add_columns_if_missing(
        conn,
        "settings",
        [
            ("screen_saver_enabled", "BOOLEAN NOT NULL DEFAULT FALSE"),
            ("clock_format", "VARCHAR NOT NULL DEFAULT '12h'"),
            ("clock_screen_timeout", "INTEGER NOT NULL DEFAULT 30"),
            ("admin_screen_timeout", "INTEGER NOT NULL DEFAULT 120"),
            ("report_screen_timeout", "INTEGER NOT NULL DEFAULT 60"),
        ],
    )
