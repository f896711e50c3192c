"""Modiva server entry point — ``python -m modiva.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from modiva.core.config.settings import Settings, get_settings
from modiva.core.server.app import create_app

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def check_bind(settings: Settings) -> None:
    """Raise unless the bind address is loopback or explicitly allowed."""
    if settings.allow_insecure_bind or _is_loopback_host(settings.host):
        return
    raise RuntimeError(
        f"Refusing to bind Modiva server to non-loopback host {settings.host!r}: "
        "tracker state is served without an auth layer. "
        "Set MODIVA_ALLOW_INSECURE_BIND=true to override (unsafe)."
    )


def describe_store_config(settings: Settings) -> str:
    """One-line summary of how state is kept, for the startup log. Never includes the key."""
    parts = [
        f"backend={settings.storage_backend}",
        f"history={settings.store_max_history}",
        f"persist_key={settings.store_persist_key}",
        f"persist_delay={settings.store_persist_delay_ms}ms",
    ]
    if settings.storage_backend == "sqlite":
        parts.append(f"db={settings.db_path}")
        parts.append(f"encrypted={'yes' if settings.encryption_key else 'no'}")
        parts.append(f"audit={'on' if settings.audit_enabled else 'off'}")
    return " ".join(parts)


def run() -> None:
    """Start the Modiva MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    check_bind(settings)
    if settings.storage_backend == "memory":
        logger.warning("Memory storage backend: tracker state is lost on restart")
    logger.info("Store: %s", describe_store_config(settings))
    logger.info("Starting Modiva Tracker server on %s:%d", settings.host, settings.port)

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
