# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Capture + Export Tray
POST /sessions/{id}/capture renders every device of the selected ecosystem
and commits the bundle to the first free tray slot. Captured variants are
final: later edits never touch them, and revising re-seeds the editor from
an item's primary raster instead.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Response, status

from screenframe.api.middleware.error_handler import TrayItemNotFoundError
from screenframe.core.capture import capture_into_session, master_from_tray_item
from screenframe.dependencies import SessionStoreDep
from screenframe.models.tray import SessionResponse, SwapRequest
from screenframe.utils.logger import get_logger

router = APIRouter(tags=["tray"])
log = get_logger(__name__)


@router.post(
    "/sessions/{session_id}/capture",
    status_code=status.HTTP_201_CREATED,
    summary="Capture the live state into the export tray",
    description=(
        "Renders one lossless PNG per device of the selected device's "
        "ecosystem in parallel. If any device fails nothing is added."
    ),
)
async def capture_to_tray(session_id: str, store: SessionStoreDep) -> dict:
    slot, item = await capture_into_session(store, session_id)
    return {"slot": slot, "item": item.summary()}


@router.get("/sessions/{session_id}/tray", summary="List tray slots")
async def list_tray(session_id: str, store: SessionStoreDep) -> dict:
    session = store.require_session(session_id)
    return {"slots": [item.summary() if item else None for item in session.tray]}


@router.get(
    "/sessions/{session_id}/tray/{item_id}/{filename}",
    summary="Download one captured variant",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_variant(
    session_id: str,
    item_id: str,
    filename: str,
    store: SessionStoreDep,
) -> Response:
    item = store.require_session(session_id).find_item(item_id)
    variant = item.find_variant(filename)
    if variant is None:
        raise TrayItemNotFoundError(f"{item_id}/{filename}")

    log.debug("variant_served", session_id=session_id, filename=filename)
    return Response(
        content=variant.png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{variant.filename}"'},
    )


@router.delete(
    "/sessions/{session_id}/tray/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a captured item",
)
async def remove_item(session_id: str, item_id: str, store: SessionStoreDep) -> Response:
    store.remove_from_tray(session_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/tray/swap", summary="Reorder two tray slots")
async def swap_slots(session_id: str, body: SwapRequest, store: SessionStoreDep) -> dict:
    store.swap_slots(session_id, body.from_slot, body.to_slot)
    session = store.require_session(session_id)
    return {"slots": [item.summary() if item else None for item in session.tray]}


@router.post(
    "/sessions/{session_id}/tray/{item_id}/revise",
    response_model=SessionResponse,
    summary="Re-open a captured item in the editor",
    description=(
        "Replaces the session master with the item's primary variant. "
        "Crop and adjustments reset to neutral; the tray is untouched."
    ),
)
async def revise_item(session_id: str, item_id: str, store: SessionStoreDep) -> SessionResponse:
    item = store.require_session(session_id).find_item(item_id)
    master = await asyncio.to_thread(master_from_tray_item, item)
    session = store.replace_master(session_id, master)

    return SessionResponse(
        session_id=session.session_id,
        master_width=master.width,
        master_height=master.height,
        view_class=master.view_class.value,
        applied_crop=master.applied_crop.model_dump(),
        message="Revision loaded from tray. Captures of it are added as new items.",
    )
