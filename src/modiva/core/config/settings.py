"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Modiva tracker configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "MODIVA_"}

    # Server
    # Loopback by default; the tool server has no auth layer.
    host: str = "127.0.0.1"
    port: int = 8001
    log_level: str = "info"
    allow_insecure_bind: bool = False

    # Store
    store_max_history: int = 50
    store_persist_key: str = "modiva_store_state"
    # Trailing debounce for auto-persist. 0 writes on every change.
    store_persist_delay_ms: int = 0

    # Storage (persisted state subset)
    storage_backend: Literal["memory", "sqlite"] = "memory"
    db_path: str = "~/.modiva/state.db"

    # Encryption of persisted values (sqlite backend only)
    encryption_key: str = ""

    # Audit trail of dispatched actions (sqlite backend only)
    audit_enabled: bool = False


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
