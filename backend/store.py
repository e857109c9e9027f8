"""Record stores.

A store keeps snake_case storage records for each RecordKind and stamps
every write with a per-collection write sequence, which is what the sync
pull endpoint pages through.
"""
import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import NamedTuple

from kinds import RecordKind

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for record store failures."""


class RecordNotFound(StoreError):
    def __init__(self, kind: RecordKind, record_id: str):
        super().__init__(f"{kind.value}/{record_id} not found")
        self.kind = kind
        self.record_id = record_id


class RecordConflict(StoreError):
    def __init__(self, kind: RecordKind, record_id: str):
        super().__init__(f"{kind.value}/{record_id} already exists")
        self.kind = kind
        self.record_id = record_id


class Change(NamedTuple):
    sequence: int
    record: dict


class RecordStore(ABC):
    @abstractmethod
    def get(self, kind: RecordKind, record_id: str) -> dict:
        """Return one record or raise RecordNotFound."""

    @abstractmethod
    def create(self, kind: RecordKind, record: dict) -> dict:
        """Insert a new record or raise RecordConflict if the id is taken."""

    @abstractmethod
    def upsert(self, kind: RecordKind, record: dict) -> dict:
        """Insert or fully replace the record with the same id."""

    @abstractmethod
    def delete(self, kind: RecordKind, record_id: str) -> None:
        """Remove a record or raise RecordNotFound."""

    @abstractmethod
    def changes_since(self, kind: RecordKind, sequence: int, limit: int) -> list[Change]:
        """Return up to `limit` records written after `sequence`, oldest first."""

    # Declared last: the method name shadows the builtin for annotations below it
    @abstractmethod
    def list(self, kind: RecordKind) -> list[dict]:
        """Return every record of a kind, ordered by id."""

    def close(self) -> None:
        pass


class MemoryStore(RecordStore):
    """Ephemeral store, lost on restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records = {kind: {} for kind in RecordKind}
        self._sequences = {kind: 0 for kind in RecordKind}

    def _write(self, kind: RecordKind, record: dict) -> dict:
        # Caller holds the lock
        self._sequences[kind] += 1
        self._records[kind][record["id"]] = Change(self._sequences[kind], copy.deepcopy(record))
        return copy.deepcopy(record)

    def get(self, kind, record_id):
        with self._lock:
            change = self._records[kind].get(record_id)
            if change is None:
                raise RecordNotFound(kind, record_id)
            return copy.deepcopy(change.record)

    def list(self, kind):
        with self._lock:
            return [
                copy.deepcopy(self._records[kind][record_id].record)
                for record_id in sorted(self._records[kind])
            ]

    def create(self, kind, record):
        with self._lock:
            if record["id"] in self._records[kind]:
                raise RecordConflict(kind, record["id"])
            return self._write(kind, record)

    def upsert(self, kind, record):
        with self._lock:
            return self._write(kind, record)

    def delete(self, kind, record_id):
        with self._lock:
            if self._records[kind].pop(record_id, None) is None:
                raise RecordNotFound(kind, record_id)

    def changes_since(self, kind, sequence, limit):
        with self._lock:
            changes = sorted(
                (c for c in self._records[kind].values() if c.sequence > sequence),
                key=lambda c: c.sequence,
            )
            return [Change(c.sequence, copy.deepcopy(c.record)) for c in changes[:limit]]


def build_store(config) -> RecordStore:
    """Create the store selected by the configuration."""
    if config.store_backend == "memory":
        logger.info("Using in-memory record store (data is lost on restart)")
        return MemoryStore()

    from sql_store import SqlStore

    return SqlStore.from_url(config.database_url)
