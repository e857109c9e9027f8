import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

logger = logging.getLogger(__name__)


def make_engine(database_url: str, echo: bool = False):
    """Create the SQLAlchemy engine for a database URL."""
    kwargs = {"echo": echo}
    if database_url.startswith("sqlite"):
        # Handlers run in FastAPI's threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    # Log database driver for observability
    db_driver = database_url.split(":", 1)[0] if ":" in database_url else "unknown"
    logger.info(f"DB_URL_DRIVER={db_driver}")

    return create_engine(database_url, **kwargs)


def create_db_and_tables(engine):
    """Create database and tables if they don't exist.
    This is safe to call multiple times - it won't wipe existing data.
    """
    # Table classes must be registered on the metadata first
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
