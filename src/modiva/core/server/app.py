"""Modiva Tracker MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from modiva.core.audit.logger import ActionAuditLogger
from modiva.core.config.settings import get_settings
from modiva.core.storage.kv import SQLiteKeyValueStorage, create_storage
from modiva.core.store.middleware import logging_middleware, payload_check_middleware
from modiva.core.store.store import Store
from modiva.domains.tracker.tools.notification_tools import register_notification_tools
from modiva.domains.tracker.tools.report_tools import register_report_tools
from modiva.domains.tracker.tools.tracker_tools import register_tracker_tools

logger = logging.getLogger(__name__)


def create_app(*, store_override: Store | None = None) -> FastMCP:
    """Create and configure the Modiva Tracker MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Builds the store and its storage backend (unless one is injected)
    3. Installs middleware (logging, payload checks, optional audit trail)
    4. Registers all tools

    An injected store is used as-is: no middleware, no auto-persist and no
    restore are added to it.
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        "Modiva Tracker",
        instructions=(
            "Modiva vitamin consumption and hemoglobin tracker. "
            "Records iron supplement intake, HB readings, consumption reports "
            "and notifications, and summarizes progress toward the target."
        ),
    )

    # --- Initialize store ---
    audit: ActionAuditLogger | None = None
    if store_override is not None:
        store = store_override
        restored = True
    else:
        storage = create_storage(settings)
        store = Store(
            max_history_size=settings.store_max_history,
            storage=storage,
            persist_key=settings.store_persist_key,
            persist_delay_ms=settings.store_persist_delay_ms,
        )
        store.use(logging_middleware)
        store.use(payload_check_middleware)
        if settings.audit_enabled:
            if isinstance(storage, SQLiteKeyValueStorage):
                audit = ActionAuditLogger(storage.database)
                store.use(audit.middleware)
                logger.info("Action audit trail enabled")
            else:
                logger.warning("Audit trail requires the sqlite storage backend; disabled")
        store.enable_auto_persist()
        restored = False

    # Saved state is restored on the first tool call, inside the server's loop.
    async def ready() -> None:
        nonlocal restored
        if not restored:
            restored = True
            await store.restore()

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        info = store.get_info()
        status = {
            "status": "ok",
            "server": "Modiva Tracker",
            "version": "0.1.0",
            "storage_backend": settings.storage_backend,
            "audit_enabled": audit is not None,
            "subscribers": info.subscriber_count,
            "middleware": info.middleware_count,
            "history_size": info.history_size,
        }
        if audit is not None:
            status["audited_actions"] = audit.count_events()
        return status

    register_tracker_tools(server, store, ready)
    register_report_tools(server, store, ready)
    register_notification_tools(server, store, ready)
    logger.info("Tracker tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
