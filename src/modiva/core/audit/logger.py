"""Action audit trail — which actions were dispatched, never what they carried.

Each dispatched action is recorded in the ``action_audit`` table with its
type, timestamp and a SHA-256 hash of the canonical JSON payload. Payloads
can hold auth tokens and HB readings, so they are never stored raw.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from modiva.core.store.actions import Action, resolve_action_type
from modiva.core.storage.database import StateDatabase

logger = logging.getLogger(__name__)


def _hash_payload(data: Any) -> str:
    """SHA-256 hash of canonical JSON, or empty string if not serializable."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()
    except (TypeError, ValueError):
        return ""


class ActionAuditLogger:
    """Records dispatched actions to SQLite.

    All writes are committed immediately so no entry is lost on crash.

    Usage::

        audit = ActionAuditLogger(state_db)
        store.use(audit.middleware)
    """

    def __init__(self, database: StateDatabase) -> None:
        self._db = database

    def log_action(self, action: Action) -> str:
        """Insert an audit row for ``action`` and return its id ("" on failure)."""
        event_id = str(uuid.uuid4())
        recognized = resolve_action_type(action.type) is not None
        payload_hash = _hash_payload(action.payload) if action.payload is not None else ""
        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO action_audit
                   (id, recorded_at, action_type, action_ts, payload_hash, recognized)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    datetime.now(timezone.utc).isoformat(),
                    str(action.type),
                    action.timestamp,
                    payload_hash or None,
                    1 if recognized else 0,
                ),
            )
            conn.commit()
        except Exception:
            logger.exception("Failed to write audit entry for %s; entry lost", action.type)
            return ""
        return event_id

    def middleware(self, action: Action, state: dict[str, Any]) -> Action:
        """Store middleware: audit the action and pass it through unchanged."""
        self.log_action(action)
        return action

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action_type: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Audit rows, newest first."""
        conditions: list[str] = []
        params: list[Any] = []

        if action_type:
            conditions.append("action_type = ?")
            params.append(action_type)
        if since:
            conditions.append("recorded_at >= ?")
            params.append(since)

        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        query = f"SELECT * FROM action_audit{where} ORDER BY recorded_at DESC, action_ts DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def count_events(self, *, unrecognized_only: bool = False) -> int:
        if unrecognized_only:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM action_audit WHERE recognized = 0"
            ).fetchone()
        else:
            row = self._db.connection.execute("SELECT COUNT(*) FROM action_audit").fetchone()
        return row[0]
