# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Abstract SessionStore
Clean interface over editing-session state: the canonical master, the
live editor slice, and the export tray slots.

InMemorySessionStore — single-process deployments and tests

Sessions hold numpy master buffers and rendered PNG bytes, so they are
kept in-process only.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from screenframe.api.middleware.error_handler import (
    SessionNotFoundError,
    TrayFullError,
    TrayItemNotFoundError,
)
from screenframe.models.editing import EditorState, EditorUpdate
from screenframe.models.master import CanonicalMaster
from screenframe.models.tray import TrayItem
from screenframe.utils.logger import get_logger

log = get_logger(__name__)


@dataclass
class Session:
    """One editing session: immutable master + mutable editor + tray slots."""
    session_id: str
    master: CanonicalMaster
    editor: EditorState
    tray: list[Optional[TrayItem]]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # Held from bucket-index resolution until the item is committed
    capture_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def tray_items(self) -> list[TrayItem]:
        return [item for item in self.tray if item is not None]

    def find_item(self, item_id: str) -> TrayItem:
        for item in self.tray:
            if item is not None and item.item_id == item_id:
                return item
        raise TrayItemNotFoundError(item_id)

    def to_response(self) -> dict:
        """Serialise to the shape returned by GET /sessions/{id}."""
        return {
            "session_id": self.session_id,
            "master": {
                "width": self.master.width,
                "height": self.master.height,
                "platform": self.master.platform.value,
                "view_class": self.master.view_class.value,
                "applied_crop": self.master.applied_crop.model_dump(),
            },
            "editor": self.editor.model_dump(mode="json"),
            "tray": [item.summary() if item else None for item in self.tray],
        }


# ─── Abstract Interface ──────────────────────────────────────────────────────

class SessionStore(ABC):
    """
    Abstract base class for session backends.
    All methods are synchronous — async fan-out lives in core.capture.
    """

    @abstractmethod
    def create_session(self, master: CanonicalMaster, editor: EditorState) -> Session:
        """Create a session around an already-normalised master."""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[Session]:
        """Return Session by ID, or None if not found."""

    @abstractmethod
    def delete_session(self, session_id: str) -> None:
        """Drop a session and release all of its tray buffers."""

    @abstractmethod
    def replace_master(self, session_id: str, master: CanonicalMaster) -> Session:
        """Swap in a new master and reset the crop/adjustment edits tied to the old one."""

    @abstractmethod
    def update_editor(self, session_id: str, update: EditorUpdate) -> EditorState:
        """Apply a partial editor update. Returns the new editor state."""

    @abstractmethod
    def add_to_tray(self, session_id: str, item: TrayItem) -> int:
        """Place a captured item in the first empty slot. Returns the slot index."""

    @abstractmethod
    def remove_from_tray(self, session_id: str, item_id: str) -> TrayItem:
        """Remove an item by id. Returns the removed (now released) item."""

    @abstractmethod
    def swap_slots(self, session_id: str, from_slot: int, to_slot: int) -> None:
        """Exchange the contents of two tray slots (either may be empty)."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of live sessions."""

    def require_session(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemorySessionStore(SessionStore):
    """
    Thread-safe in-memory session store using a dict + RLock.
    Oldest sessions are evicted once max_sessions is exceeded.
    All data is lost on process restart.
    """

    def __init__(self, tray_slots: int = 8, max_sessions: int = 64) -> None:
        self._store: dict[str, Session] = {}
        self._lock = threading.RLock()
        self._tray_slots = tray_slots
        self._max_sessions = max_sessions

    def create_session(self, master: CanonicalMaster, editor: EditorState) -> Session:
        session = Session(
            session_id=str(uuid.uuid4()),
            master=master,
            editor=editor,
            tray=[None] * self._tray_slots,
        )
        with self._lock:
            self._store[session.session_id] = session
            self._evict_oldest()
        log.info("session_created", session_id=session.session_id, backend="memory")
        return session

    def _evict_oldest(self) -> None:
        while len(self._store) > self._max_sessions:
            oldest = min(self._store.values(), key=lambda s: s.updated_at)
            self._store.pop(oldest.session_id)
            log.info("session_evicted", session_id=oldest.session_id)

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._store.get(session_id)

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            session = self._store.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        log.info(
            "session_deleted",
            session_id=session_id,
            released_items=len(session.tray_items()),
        )

    def replace_master(self, session_id: str, master: CanonicalMaster) -> Session:
        with self._lock:
            session = self.require_session(session_id)
            session.master = master
            session.editor.reset_for_new_master()
            session.updated_at = datetime.now(timezone.utc)

        log.info(
            "master_replaced",
            session_id=session_id,
            master_size=master.size,
            platform=master.platform.value,
        )
        return session

    def update_editor(self, session_id: str, update: EditorUpdate) -> EditorState:
        with self._lock:
            session = self.require_session(session_id)
            changes = {name: value for name, value in update if value is not None}
            # Revalidate the merged state so a bad combination never lands
            merged = session.editor.model_copy(update=changes)
            session.editor = EditorState.model_validate(merged.model_dump())
            session.updated_at = datetime.now(timezone.utc)
            editor = session.editor

        log.debug("editor_updated", session_id=session_id, fields=sorted(changes))
        return editor

    def add_to_tray(self, session_id: str, item: TrayItem) -> int:
        with self._lock:
            session = self.require_session(session_id)
            try:
                slot = session.tray.index(None)
            except ValueError:
                raise TrayFullError(
                    "Export tray is full. Remove an item before capturing again."
                ) from None
            session.tray[slot] = item
            session.updated_at = datetime.now(timezone.utc)

        log.info(
            "tray_item_added",
            session_id=session_id,
            item_id=item.item_id,
            slot=slot,
            variants=len(item.variants),
        )
        return slot

    def remove_from_tray(self, session_id: str, item_id: str) -> TrayItem:
        with self._lock:
            session = self.require_session(session_id)
            item = session.find_item(item_id)
            session.tray[session.tray.index(item)] = None
            session.updated_at = datetime.now(timezone.utc)

        log.info("tray_item_removed", session_id=session_id, item_id=item_id)
        return item

    def swap_slots(self, session_id: str, from_slot: int, to_slot: int) -> None:
        with self._lock:
            session = self.require_session(session_id)
            n = len(session.tray)
            if not (0 <= from_slot < n and 0 <= to_slot < n):
                raise TrayItemNotFoundError(
                    f"slot out of range (0–{n - 1}): {from_slot}, {to_slot}"
                )
            tray = session.tray
            tray[from_slot], tray[to_slot] = tray[to_slot], tray[from_slot]
            session.updated_at = datetime.now(timezone.utc)

        log.debug("tray_slots_swapped", session_id=session_id, slots=(from_slot, to_slot))

    def count(self) -> int:
        """Return total number of sessions in store (useful for health checks)."""
        with self._lock:
            return len(self._store)
