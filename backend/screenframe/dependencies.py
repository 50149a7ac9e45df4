# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — FastAPI Dependencies
Singleton provider for the SessionStore, created once during the
lifespan startup in main.py and injected into routes via Depends().
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from screenframe.config import get_settings
from screenframe.core.session_store import InMemorySessionStore, SessionStore
from screenframe.utils.logger import get_logger

log = get_logger(__name__)

# ─── SessionStore Singleton ───────────────────────────────────────────────────

_session_store: SessionStore | None = None


def init_session_store() -> None:
    """Called once during application lifespan startup."""
    global _session_store
    settings = get_settings()
    log.info(
        "init_session_store",
        backend="memory",
        tray_slots=settings.tray_slots,
        max_sessions=settings.max_sessions,
    )
    _session_store = InMemorySessionStore(
        tray_slots=settings.tray_slots,
        max_sessions=settings.max_sessions,
    )


def get_session_store() -> SessionStore:
    """
    FastAPI dependency: inject the SessionStore singleton into route handlers.

    Usage in a route:
        @router.get("/sessions/{session_id}")
        def get_session(session_id: str, store: SessionStoreDep):
            session = store.require_session(session_id)
            ...
    """
    if _session_store is None:
        raise RuntimeError(
            "SessionStore has not been initialised. "
            "Ensure init_session_store() is called during app lifespan startup."
        )
    return _session_store


# Annotated type alias for clean route signatures
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
