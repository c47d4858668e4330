from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Generator, List, Optional, Sequence

from .errors import PersistenceError
from .models import TaskEntity
from .schemas import TaskRecord, TaskRecordList
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todos"


# PUBLIC_INTERFACE
class PersistencePort(ABC):
    """Load/save boundary the TaskStore writes through on every mutation."""

    @abstractmethod
    def load(self) -> List[TaskEntity]:
        """
        Return the saved collection in stored order.
        Missing, unreadable or corrupt data yields an empty list, never an exception.
        """

    @abstractmethod
    def save(self, tasks: Sequence[TaskEntity]) -> None:
        """Persist the full collection. Raise PersistenceError if the write fails."""


class KeyValuePersistence(PersistencePort):
    """
    Shared load/save rules for backends that keep the whole collection as one
    value under a single storage key.
    """

    def __init__(self, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.key = key

    @abstractmethod
    def _read_records(self) -> Optional[List[TaskRecord]]:
        """Return the stored records, None if nothing was saved yet."""

    @abstractmethod
    def _write_records(self, records: List[TaskRecord]) -> None:
        """Replace the stored value with `records`."""

    def load(self) -> List[TaskEntity]:
        try:
            records = self._read_records()
        except (OSError, ValueError, sqlite3.Error) as e:
            # pydantic.ValidationError and json.JSONDecodeError are ValueErrors
            logger.warning("Discarding unreadable task data under key %r: %s", self.key, e)
            return []
        if records is None:
            logger.debug("No saved tasks under key %r", self.key)
            return []

        tasks: List[TaskEntity] = []
        seen: set[int] = set()
        for record in records:
            if record.id in seen:
                logger.warning("Dropping task with duplicate id %s under key %r", record.id, self.key)
                continue
            seen.add(record.id)
            tasks.append(record.to_entity())
        logger.debug("Loaded %d task(s) under key %r", len(tasks), self.key)
        return tasks

    def save(self, tasks: Sequence[TaskEntity]) -> None:
        records = [TaskRecord.from_entity(t) for t in tasks]
        try:
            self._write_records(records)
        except (OSError, sqlite3.Error) as e:
            logger.error("Failed to save %d task(s) under key %r: %s", len(records), self.key, e)
            raise PersistenceError(f"could not save tasks under key {self.key!r}: {e}") from e
        logger.debug("Saved %d task(s) under key %r", len(records), self.key)


def _dump_text(records: List[TaskRecord]) -> str:
    return TaskRecordList.dump_json(records, by_alias=True).decode("utf-8")


# PUBLIC_INTERFACE
class InMemoryPersistence(KeyValuePersistence):
    """
    Keeps serialized collections in a dict of storage key -> JSON text,
    the same shape browser local storage has. Suitable for tests and throwaway runs.
    """

    def __init__(self, key: str = DEFAULT_STORAGE_KEY, values: Optional[Dict[str, str]] = None) -> None:
        super().__init__(key)
        self.values: Dict[str, str] = {} if values is None else values

    def _read_records(self) -> Optional[List[TaskRecord]]:
        raw = self.values.get(self.key)
        if raw is None:
            return None
        return TaskRecordList.validate_json(raw)

    def _write_records(self, records: List[TaskRecord]) -> None:
        self.values[self.key] = _dump_text(records)


# PUBLIC_INTERFACE
class JsonFilePersistence(KeyValuePersistence):
    """
    Stores collections in a JSON object file mapping storage keys to task arrays.
    Other keys in the file are left untouched; writes replace the file atomically.
    """

    def __init__(self, path: str, key: str = DEFAULT_STORAGE_KEY) -> None:
        super().__init__(key)
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def _read_document(self) -> dict:
        with open(self._path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        if not isinstance(doc, dict):
            raise ValueError(f"expected a JSON object in {self._path}, got {type(doc).__name__}")
        return doc

    def _read_records(self) -> Optional[List[TaskRecord]]:
        if not os.path.exists(self._path):
            return None
        value = self._read_document().get(self.key)
        if value is None:
            return None
        return TaskRecordList.validate_python(value)

    def _write_records(self, records: List[TaskRecord]) -> None:
        doc: dict = {}
        if os.path.exists(self._path):
            try:
                doc = self._read_document()
            except ValueError:
                logger.warning("Overwriting unreadable storage file %s", self._path)
                doc = {}
        doc[self.key] = TaskRecordList.dump_python(records, mode="json", by_alias=True)

        directory = os.path.dirname(self._path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tasks-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


@dataclass(frozen=True)
class _Cols:
    table: str = "storage"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


# PUBLIC_INTERFACE
class SQLitePersistence(KeyValuePersistence):
    """
    Lightweight SQLite key/value table; the collection is one row keyed by storage key.
    """

    def __init__(self, db_path: str, key: str = DEFAULT_STORAGE_KEY) -> None:
        super().__init__(key)
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        try:
            self._init_db()
        except sqlite3.Error as e:
            # Unusable file: load() degrades to [] and save() raises PersistenceError
            logger.warning("Could not prepare task database %s: %s", db_path, e)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def _read_records(self) -> Optional[List[TaskRecord]]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (self.key,)
            ).fetchone()
        if row is None:
            return None
        return TaskRecordList.validate_json(row[_COLS.value])

    def _write_records(self, records: List[TaskRecord]) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}) VALUES (?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                """,
                (self.key, _dump_text(records)),
            )


# PUBLIC_INTERFACE
def get_persistence(settings: Optional[Settings] = None) -> PersistencePort:
    """
    Factory to return the configured persistence backend based on settings.
    - memory: InMemoryPersistence
    - json: JsonFilePersistence at settings.json_path
    - sqlite: SQLitePersistence at settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        return SQLitePersistence(settings.sqlite_db_path, key=settings.storage_key)
    if settings.persistence_backend == "json":
        return JsonFilePersistence(settings.json_path, key=settings.storage_key)
    return InMemoryPersistence(key=settings.storage_key)
