"""Wall clock for state transitions.

Transitions call ``clock.now_ms()`` through the module attribute so tests can
monkeypatch a fixed or advancing time source.
"""

from __future__ import annotations

import time


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)
