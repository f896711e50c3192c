"""Key-value storage backends used by the store for persist/restore.

The store only talks to the ``KeyValueStorage`` protocol. Values are opaque
strings (the store serializes JSON itself), so backends never need to know
the shape of the state tree.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from modiva.core.config.settings import Settings
from modiva.core.storage.database import StateDatabase
from modiva.core.storage.encryption import EncryptionError, ValueCipher

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a storage backend cannot read or write a value."""


@runtime_checkable
class KeyValueStorage(Protocol):
    """Async key-value interface for durable device storage."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def remove(self, key: str) -> None:
        """Delete ``key``. Missing keys are ignored."""
        ...


class MemoryKeyValueStorage:
    """In-process storage. Used in tests and when no durable backend is configured."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.writes = 0

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for {key!r} must be a string, got {type(value).__name__}")
        self._data[key] = value
        self.writes += 1

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SQLiteKeyValueStorage:
    """Storage backed by the ``kv_store`` table, optionally encrypted at rest.

    Usage::

        db = StateDatabase("~/.modiva/state.db")
        db.initialize()
        storage = SQLiteKeyValueStorage(db, ValueCipher(key))
        await storage.set("modiva_store_state", '{"auth": {...}}')
    """

    def __init__(self, database: StateDatabase, cipher: ValueCipher | None = None) -> None:
        self._db = database
        self._cipher = cipher

    @property
    def database(self) -> StateDatabase:
        return self._db

    @property
    def encrypted(self) -> bool:
        return self._cipher is not None

    async def get(self, key: str) -> str | None:
        try:
            row = self._db.connection.execute(
                "SELECT value, encrypted FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc

        if row is None:
            return None
        if not row["encrypted"]:
            return row["value"]
        if self._cipher is None:
            raise StorageError(f"Value for {key!r} is encrypted but no key is configured")
        try:
            return self._cipher.decrypt(row["value"])
        except EncryptionError as exc:
            raise StorageError(f"Failed to decrypt {key!r}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for {key!r} must be a string, got {type(value).__name__}")
        stored = self._cipher.encrypt(value) if self._cipher is not None else value
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO kv_store (key, value, encrypted, updated_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       encrypted = excluded.encrypted,
                       updated_at = excluded.updated_at""",
                (key, stored, 1 if self._cipher is not None else 0, now),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc
        logger.debug("Stored %s (%d chars, encrypted=%s)", key, len(value), self.encrypted)

    async def remove(self, key: str) -> None:
        try:
            conn = self._db.connection
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to delete {key!r}: {exc}") from exc


def create_storage(settings: Settings) -> KeyValueStorage:
    """Build the storage backend selected by ``settings.storage_backend``.

    The sqlite backend encrypts values when ``encryption_key`` is set. An
    invalid key falls back to in-memory storage rather than writing plaintext.
    """
    if settings.storage_backend != "sqlite":
        logger.info("Using in-memory state storage (state is lost on restart)")
        return MemoryKeyValueStorage()

    cipher: ValueCipher | None = None
    if settings.encryption_key:
        try:
            cipher = ValueCipher(settings.encryption_key)
        except EncryptionError as exc:
            logger.error("Failed to initialize state storage: %s", exc)
            logger.warning("Continuing with in-memory storage. State will not survive a restart")
            return MemoryKeyValueStorage()

    database = StateDatabase(settings.db_path)
    database.initialize()
    logger.info(
        "SQLite state storage at %s (schema v%d, encrypted=%s)",
        settings.db_path,
        database.get_schema_version(),
        cipher is not None,
    )
    return SQLiteKeyValueStorage(database, cipher)
