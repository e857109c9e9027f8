#!/usr/bin/env python3
"""
Manual script to apply pending migrations to the configured database.
The server also runs them at startup; use this before a deploy to check.
"""
import logging
import os
import sys

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import load_config  # noqa: E402
from db import create_db_and_tables, make_engine  # noqa: E402
from migrations import run_migrations  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    config = load_config()
    if config.store_backend != "sql":
        logger.error("STORE_BACKEND is not 'sql', nothing to migrate")
        sys.exit(1)

    engine = make_engine(config.database_url)
    logger.info("Running pending migrations...")
    try:
        create_db_and_tables(engine)
        applied = run_migrations(engine)
        logger.info(f"Applied migrations: {applied or 'none pending'}")
    except Exception:
        logger.exception("Migration failed")
        sys.exit(1)
    finally:
        engine.dispose()
