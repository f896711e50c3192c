"""Shared test fixtures for Modiva tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODIVA_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("MODIVA_ENCRYPTION_KEY", "")
    monkeypatch.setenv("MODIVA_AUDIT_ENABLED", "false")
    monkeypatch.setenv("MODIVA_STORE_PERSIST_DELAY_MS", "0")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from modiva.core.storage.kv import MemoryKeyValueStorage  # noqa: E402
from modiva.core.store import clock  # noqa: E402
from modiva.core.store.store import Store  # noqa: E402


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

class FakeClock:
    """Settable replacement for ``clock.now_ms``."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def fake_clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(clock, "now_ms", fake)
    return fake


# ---------------------------------------------------------------------------
# Store and storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_storage() -> MemoryKeyValueStorage:
    return MemoryKeyValueStorage()


@pytest.fixture
def store(memory_storage: MemoryKeyValueStorage) -> Store:
    """A fresh store with in-memory storage and no auto-persist."""
    return Store(storage=memory_storage)


@pytest.fixture
def state_db():
    """Create an in-memory StateDatabase for testing."""
    from modiva.core.storage.database import StateDatabase

    db = StateDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def value_cipher():
    """Create a ValueCipher with a test key."""
    from cryptography.fernet import Fernet

    from modiva.core.storage.encryption import ValueCipher

    return ValueCipher(Fernet.generate_key().decode())


@pytest.fixture
def audit_logger(state_db):
    """Create an ActionAuditLogger backed by in-memory SQLite."""
    from modiva.core.audit.logger import ActionAuditLogger

    return ActionAuditLogger(state_db)
