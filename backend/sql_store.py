import logging

from sqlalchemy import delete, func, insert, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from db import create_db_and_tables, make_engine
from kinds import RecordKind
from migrations import run_migrations
from models import SyncCounter
from store import Change, RecordConflict, RecordNotFound, RecordStore

logger = logging.getLogger(__name__)

SUPPORTED_DIALECTS = ("sqlite", "postgresql")


class SqlStore(RecordStore):
    """Relational store: one table per kind plus a write-sequence counter row per kind."""

    def __init__(self, engine):
        if engine.dialect.name not in SUPPORTED_DIALECTS:
            raise RuntimeError(
                f"Unsupported database dialect '{engine.dialect.name}'; use one of {', '.join(SUPPORTED_DIALECTS)}"
            )
        self.engine = engine
        self.is_postgres = engine.dialect.name == "postgresql"

    @classmethod
    def from_url(cls, database_url: str) -> "SqlStore":
        """Connect, create missing tables, and apply pending migrations."""
        engine = make_engine(database_url)
        try:
            store = cls(engine)
        except RuntimeError:
            engine.dispose()
            raise
        create_db_and_tables(engine)
        run_migrations(engine)
        store.ensure_counters()
        logger.info("Database initialized")
        return store

    def ensure_counters(self):
        with Session(self.engine) as session:
            for kind in RecordKind:
                if session.get(SyncCounter, kind.value) is not None:
                    continue
                table = kind.table
                highest = session.exec(select(func.max(table.sequence))).one()
                session.add(SyncCounter(collection=kind.value, value=highest or 0))
            session.commit()

    def _next_sequence(self, session: Session, kind: RecordKind) -> int:
        # The counter row stays write-locked until commit, so writes to one
        # collection commit in sequence order.
        session.execute(
            update(SyncCounter)
            .where(SyncCounter.collection == kind.value)
            .values(value=SyncCounter.value + 1)
        )
        return session.exec(
            select(SyncCounter.value).where(SyncCounter.collection == kind.value)
        ).one()

    def _upsert_statement(self, kind: RecordKind, values: dict):
        dialect_insert = postgresql.insert if self.is_postgres else sqlite.insert
        stmt = dialect_insert(kind.table.__table__).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={column: stmt.excluded[column] for column in values if column != "id"},
        )

    @staticmethod
    def _to_record(row) -> dict:
        return row.model_dump(exclude={"sequence"})

    def get(self, kind, record_id):
        with Session(self.engine) as session:
            row = session.get(kind.table, record_id)
            if row is None:
                raise RecordNotFound(kind, record_id)
            return self._to_record(row)

    def list(self, kind):
        table = kind.table
        with Session(self.engine) as session:
            rows = session.exec(select(table).order_by(table.id)).all()
            return [self._to_record(row) for row in rows]

    def create(self, kind, record):
        with Session(self.engine) as session:
            try:
                sequence = self._next_sequence(session, kind)
                session.execute(insert(kind.table.__table__).values(**record, sequence=sequence))
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise RecordConflict(kind, record["id"]) from e
        return dict(record)

    def upsert(self, kind, record):
        with Session(self.engine) as session:
            sequence = self._next_sequence(session, kind)
            session.execute(self._upsert_statement(kind, {**record, "sequence": sequence}))
            session.commit()
        return dict(record)

    def delete(self, kind, record_id):
        table = kind.table
        with Session(self.engine) as session:
            result = session.execute(delete(table).where(table.id == record_id))
            session.commit()
            if not result.rowcount:
                raise RecordNotFound(kind, record_id)

    def changes_since(self, kind, sequence, limit):
        table = kind.table
        with Session(self.engine) as session:
            rows = session.exec(
                select(table)
                .where(table.sequence > sequence)
                .order_by(table.sequence)
                .limit(limit)
            ).all()
            return [Change(row.sequence, self._to_record(row)) for row in rows]

    def close(self):
        self.engine.dispose()
