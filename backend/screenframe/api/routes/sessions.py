# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — /sessions
Upload a screenshot into a new editing session, adjust the live editor
state, and preview any device with exactly the pixels an export would get.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Form, Response, UploadFile, status

from screenframe.config import get_settings
from screenframe.core.capture import render_preview
from screenframe.dependencies import SessionStoreDep
from screenframe.models.device import DeviceType, get_spec
from screenframe.models.editing import EditorState, EditorUpdate
from screenframe.models.tray import SessionResponse
from screenframe.modules.preprocessing.normalizer import prepare_upload
from screenframe.utils.logger import get_logger

router = APIRouter(tags=["sessions"])
log = get_logger(__name__)


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a screenshot and open an editing session",
    description=(
        "The upload is validated, trimmed of uniform top/bottom bands and, "
        "for Apple devices, inset to the canonical viewport. The resulting "
        "master is used for every later preview and capture."
    ),
)
async def create_session(
    file: UploadFile,
    store: SessionStoreDep,
    device: Optional[DeviceType] = Form(None),
) -> SessionResponse:
    settings = get_settings()
    device = device or DeviceType(settings.default_device)
    platform = get_spec(device).platform

    data = await file.read()
    log.info(
        "upload_received",
        filename=file.filename,
        size_bytes=len(data),
        device=device.value,
    )

    master = await asyncio.to_thread(prepare_upload, data, platform, file.content_type)
    editor = EditorState(selected_device=device, frame_color=settings.default_frame_color)
    session = store.create_session(master, editor)

    return SessionResponse(
        session_id=session.session_id,
        master_width=master.width,
        master_height=master.height,
        view_class=master.view_class.value,
        applied_crop=master.applied_crop.model_dump(),
    )


@router.get("/sessions/{session_id}", summary="Session state, master info and tray")
async def get_session(session_id: str, store: SessionStoreDep) -> dict:
    return store.require_session(session_id).to_response()


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close a session and release its buffers",
)
async def delete_session(session_id: str, store: SessionStoreDep) -> Response:
    store.delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/sessions/{session_id}/editor",
    summary="Update fit, export mode, device, colour, crop or adjustments",
)
async def update_editor(
    session_id: str,
    update: EditorUpdate,
    store: SessionStoreDep,
) -> dict:
    editor = store.update_editor(session_id, update)
    return editor.model_dump(mode="json")


@router.get(
    "/sessions/{session_id}/preview/{device}",
    summary="Render the live editor state for one device",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def preview(session_id: str, device: DeviceType, store: SessionStoreDep) -> Response:
    session = store.require_session(session_id)
    png = await asyncio.to_thread(
        render_preview, session.master, session.editor.model_copy(deep=True), get_spec(device)
    )
    return Response(content=png, media_type="image/png")
