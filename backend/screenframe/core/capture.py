# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Capture Orchestrator
Freezes the live editor state into one TrayItem by rendering every device
of the selected device's ecosystem in parallel.

Execution order:
  1. Snapshot editor values (passed by value to every worker)
  2. Resolve bucket index for (platform, export mode)
  3. PARALLEL: one render per device spec on worker threads
  4. Name variants and assemble the TrayItem

`capture` commits nothing; `capture_into_session` commits the item under
the session's capture lock. A failing render fails the whole capture once
every worker has settled.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Iterable, Optional

import structlog

from screenframe.api.middleware.error_handler import CaptureFailed, TrayFullError
from screenframe.core.session_store import SessionStore
from screenframe.models.device import DeviceSpec, Platform, get_spec, specs_for_platform
from screenframe.models.editing import EditorState, ExportMode
from screenframe.models.master import CanonicalMaster
from screenframe.models.tray import RenderedVariant, TrayItem
from screenframe.modules.export.naming import export_filename
from screenframe.modules.preprocessing.normalizer import master_from_source
from screenframe.modules.preprocessing.validator import decode_image
from screenframe.modules.rendering.compositor import render
from screenframe.utils.logger import get_logger

log = get_logger(__name__)


def next_bucket_index(
    tray: Iterable[Optional[TrayItem]],
    platform: Platform,
    export_mode: ExportMode,
) -> int:
    """Highest index already used by (platform, export_mode) plus one."""
    used = [
        item.index
        for item in tray
        if item is not None and item.platform == platform and item.export_mode == export_mode
    ]
    return max(used, default=0) + 1


def render_preview(master: CanonicalMaster, editor: EditorState, spec: DeviceSpec) -> bytes:
    """Single-device render of the live state; the same path capture uses."""
    return render(
        master,
        spec,
        editor.fit_mode,
        editor.export_mode,
        editor.adjustments,
        editor.crop_area,
        editor.frame_color,
    )


def _render_variant(
    master: CanonicalMaster,
    editor: EditorState,
    spec: DeviceSpec,
    index: int,
) -> RenderedVariant:
    png = render_preview(master, editor, spec)
    return RenderedVariant(
        device_type=spec.id,
        filename=export_filename(spec, editor.export_mode, index),
        width=spec.width,
        height=spec.height,
        png=png,
    )


async def capture(
    master: CanonicalMaster,
    editor: EditorState,
    tray: Iterable[Optional[TrayItem]],
    session_id: Optional[str] = None,
) -> TrayItem:
    """
    Render every device of the selected ecosystem and bundle the variants.

    Args:
        master:     Shared read-only canonical master
        editor:     Live editor state; copied before any worker starts
        tray:       Current tray slots, used only for the bucket index
        session_id: Bound to log context for the duration of the fan-out

    Returns:
        TrayItem ready to be placed in the tray

    Raises:
        CaptureFailed: any device render failed; no item is produced
    """
    if session_id is not None:
        structlog.contextvars.bind_contextvars(session_id=session_id)

    try:
        snapshot = editor.model_copy(deep=True)
        platform = get_spec(snapshot.selected_device).platform
        specs = specs_for_platform(platform)
        index = next_bucket_index(tray, platform, snapshot.export_mode)

        log.info(
            "capture_start",
            platform=platform.value,
            export_mode=snapshot.export_mode.value,
            index=index,
            devices=[s.id.value for s in specs],
        )
        t0 = time.perf_counter()

        results = await asyncio.gather(
            *(
                asyncio.to_thread(_render_variant, master, snapshot, spec, index)
                for spec in specs
            ),
            return_exceptions=True,
        )

        failures = [
            (spec, r) for spec, r in zip(specs, results) if isinstance(r, BaseException)
        ]
        if failures:
            spec, exc = failures[0]
            err_msg = f"{type(exc).__name__}: {exc}"
            log.error(
                "capture_failed",
                device=spec.id.value,
                failed=len(failures),
                error=err_msg,
            )
            raise CaptureFailed(
                f"Capture failed while rendering {spec.name}: {err_msg}"
            ) from exc

        item = TrayItem(
            item_id=str(uuid.uuid4()),
            platform=platform,
            export_mode=snapshot.export_mode,
            index=index,
            frame_color=snapshot.frame_color,
            variants=tuple(results),
        )
        log.info(
            "capture_complete",
            item_id=item.item_id,
            variants=len(item.variants),
            elapsed_s=round(time.perf_counter() - t0, 2),
        )
        return item
    finally:
        if session_id is not None:
            structlog.contextvars.unbind_contextvars("session_id")


async def capture_into_session(store: SessionStore, session_id: str) -> tuple[int, TrayItem]:
    """
    Capture the session's live state and commit it to the first free slot.

    Captures on one session are serialised: the bucket index is resolved and
    the item committed under the session's capture lock, so two overlapping
    requests never share an index or a filename.
    """
    session = store.require_session(session_id)
    async with session.capture_lock:
        if all(slot is not None for slot in session.tray):
            raise TrayFullError(
                "Export tray is full. Remove an item before capturing again."
            )
        item = await capture(
            session.master,
            session.editor,
            list(session.tray),
            session_id=session_id,
        )
        slot = store.add_to_tray(session_id, item)
    return slot, item


def master_from_tray_item(item: TrayItem) -> CanonicalMaster:
    """
    Decode a tray item's primary variant into a fresh master for revision.
    The rendered raster is taken as-is; no border pass runs on it.
    """
    variant = item.primary_variant
    pixels = decode_image(variant.png, label=variant.filename)
    return master_from_source(pixels, item.platform)
