# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Infrastructure smoke tests.
Tests config loading, the device registry, SessionStore behaviour,
export filenames, and the API surface end to end.
All images are synthetic numpy arrays.
"""

import cv2
import numpy as np
import pytest


def _make_bgr(h=200, w=100, seed=0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def _png_bytes(img: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def _make_master(h=200, w=100):
    from screenframe.models.device import Platform
    from screenframe.modules.preprocessing.normalizer import master_from_source
    return master_from_source(_make_bgr(h, w), Platform.APPLE)


def _make_item(index=1, platform=None, export_mode=None):
    from screenframe.models.device import DeviceType, Platform
    from screenframe.models.editing import ExportMode
    from screenframe.models.tray import RenderedVariant, TrayItem

    variant = RenderedVariant(
        device_type=DeviceType.IPHONE,
        filename=f"apple_phone_6.7_rect_{index:02d}.png",
        width=10,
        height=20,
        png=_png_bytes(_make_bgr(20, 10)),
    )
    return TrayItem(
        item_id=f"item-{index}",
        platform=platform or Platform.APPLE,
        export_mode=export_mode or ExportMode.RECTANGLE,
        index=index,
        frame_color="#1a1a1a",
        variants=(variant,),
    )


# ─── Config ──────────────────────────────────────────────────────────────────

def test_settings_load_defaults():
    from screenframe.config import Settings
    s = Settings(_env_file=None, log_level="INFO")
    assert s.upload_max_mb == 8
    assert s.border_tolerance == 5
    assert s.tray_slots == 8
    assert s.default_device == "IPHONE"
    assert s.default_frame_color == "#1a1a1a"


def test_settings_env_override():
    from screenframe.config import Settings
    s = Settings(_env_file=None, tray_slots=4, log_level="WARNING")
    assert s.tray_slots == 4
    assert s.log_level == "WARNING"


def test_settings_upload_max_bytes():
    from screenframe.config import Settings
    s = Settings(_env_file=None, upload_max_mb=10)
    assert s.upload_max_bytes == 10 * 1024 * 1024


# ─── Device Registry ─────────────────────────────────────────────────────────

def test_registry_dimensions():
    from screenframe.models.device import DeviceType, get_spec
    assert get_spec(DeviceType.IPHONE).size == (1290, 2796)
    assert get_spec(DeviceType.IPHONE_61).size == (1179, 2556)
    assert get_spec(DeviceType.IPAD).size == (2048, 2732)
    assert get_spec(DeviceType.PHONE).size == (1080, 1920)
    assert get_spec(DeviceType.TABLET_7).size == (1200, 1920)
    assert get_spec(DeviceType.TABLET_10).size == (1600, 2560)
    assert get_spec(DeviceType.CHROMEBOOK).size == (1920, 1080)


def test_registry_platform_grouping():
    from screenframe.models.device import DeviceType, Platform, specs_for_platform
    apple = [s.id for s in specs_for_platform(Platform.APPLE)]
    android = [s.id for s in specs_for_platform(Platform.ANDROID)]
    assert apple == [DeviceType.IPHONE, DeviceType.IPHONE_61, DeviceType.IPAD]
    assert len(android) == 4
    assert DeviceType.CHROMEBOOK in android


def test_get_spec_accepts_string():
    from screenframe.models.device import DeviceType, get_spec
    assert get_spec("TABLET_10").id == DeviceType.TABLET_10
    with pytest.raises(ValueError):
        get_spec("NOKIA_3310")


# ─── Export Filenames ────────────────────────────────────────────────────────

def test_export_filename_with_size_label():
    from screenframe.models.device import DeviceType, get_spec
    from screenframe.models.editing import ExportMode
    from screenframe.modules.export.naming import export_filename

    assert export_filename(get_spec(DeviceType.IPHONE), ExportMode.RECTANGLE, 1) == \
        "apple_phone_6.7_rect_01.png"
    assert export_filename(get_spec(DeviceType.TABLET_7), ExportMode.FRAME, 12) == \
        "android_tablet_7in_mockup_12.png"


def test_export_filename_drops_empty_size():
    from screenframe.models.device import DeviceType, get_spec
    from screenframe.models.editing import ExportMode
    from screenframe.modules.export.naming import export_filename

    name = export_filename(get_spec(DeviceType.CHROMEBOOK), ExportMode.FRAME, 3)
    assert name == "android_chromebook_mockup_03.png"
    assert "__" not in name


# ─── Editing Models ──────────────────────────────────────────────────────────

def test_crop_area_rejects_overflow():
    from pydantic import ValidationError
    from screenframe.models.editing import CropArea
    with pytest.raises(ValidationError):
        CropArea(x=50, y=0, width=60, height=100)


def test_crop_area_to_pixels():
    from screenframe.models.editing import CropArea
    crop = CropArea(x=10, y=20, width=50, height=25)
    assert crop.to_pixels(200, 400) == (20.0, 80.0, 100.0, 100.0)


def test_master_pixels_read_only():
    master = _make_master()
    with pytest.raises(ValueError):
        master.pixels[0, 0, 0] = 1


# ─── InMemorySessionStore ────────────────────────────────────────────────────

def test_session_store_create_and_get():
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import EditorState

    store = InMemorySessionStore(tray_slots=3)
    session = store.create_session(_make_master(), EditorState())

    fetched = store.get_session(session.session_id)
    assert fetched is session
    assert fetched.tray == [None, None, None]
    assert store.count() == 1


def test_session_store_get_nonexistent():
    from screenframe.api.middleware.error_handler import SessionNotFoundError
    from screenframe.core.session_store import InMemorySessionStore

    store = InMemorySessionStore()
    assert store.get_session("nope") is None
    with pytest.raises(SessionNotFoundError):
        store.require_session("nope")
    with pytest.raises(SessionNotFoundError):
        store.delete_session("nope")


def test_session_store_evicts_oldest():
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import EditorState

    store = InMemorySessionStore(max_sessions=2)
    first = store.create_session(_make_master(), EditorState())
    store.create_session(_make_master(), EditorState())
    store.create_session(_make_master(), EditorState())

    assert store.count() == 2
    assert store.get_session(first.session_id) is None


def test_session_store_update_editor_partial():
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import (
        EditorState,
        EditorUpdate,
        ExportMode,
        FitMode,
        ImageAdjustments,
    )

    store = InMemorySessionStore()
    session = store.create_session(_make_master(), EditorState())
    editor = store.update_editor(
        session.session_id,
        EditorUpdate(export_mode=ExportMode.FRAME, adjustments=ImageAdjustments(contrast=120)),
    )

    assert editor.export_mode == ExportMode.FRAME
    assert editor.fit_mode == FitMode.FIT
    assert editor.adjustments.contrast == 120
    assert store.get_session(session.session_id).editor == editor


def test_session_store_replace_master_resets_crop():
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import CropArea, EditorState, EditorUpdate, ImageAdjustments

    store = InMemorySessionStore()
    session = store.create_session(_make_master(), EditorState())
    store.update_editor(
        session.session_id,
        EditorUpdate(
            crop_area=CropArea(x=10, y=10, width=50, height=50),
            adjustments=ImageAdjustments(brightness=150),
        ),
    )

    new_master = _make_master(60, 30)
    updated = store.replace_master(session.session_id, new_master)

    assert updated.master is new_master
    assert updated.editor.crop_area.is_full
    assert updated.editor.adjustments.is_neutral


def test_tray_fills_first_empty_slot():
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import EditorState

    store = InMemorySessionStore(tray_slots=3)
    session = store.create_session(_make_master(), EditorState())

    assert store.add_to_tray(session.session_id, _make_item(1)) == 0
    assert store.add_to_tray(session.session_id, _make_item(2)) == 1
    store.remove_from_tray(session.session_id, "item-1")
    assert store.add_to_tray(session.session_id, _make_item(3)) == 0


def test_tray_full_raises():
    from screenframe.api.middleware.error_handler import TrayFullError
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import EditorState

    store = InMemorySessionStore(tray_slots=1)
    session = store.create_session(_make_master(), EditorState())
    store.add_to_tray(session.session_id, _make_item(1))

    with pytest.raises(TrayFullError):
        store.add_to_tray(session.session_id, _make_item(2))


def test_tray_remove_unknown_item():
    from screenframe.api.middleware.error_handler import TrayItemNotFoundError
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import EditorState

    store = InMemorySessionStore()
    session = store.create_session(_make_master(), EditorState())
    with pytest.raises(TrayItemNotFoundError):
        store.remove_from_tray(session.session_id, "missing")


def test_tray_swap_slots():
    from screenframe.api.middleware.error_handler import TrayItemNotFoundError
    from screenframe.core.session_store import InMemorySessionStore
    from screenframe.models.editing import EditorState

    store = InMemorySessionStore(tray_slots=4)
    session = store.create_session(_make_master(), EditorState())
    store.add_to_tray(session.session_id, _make_item(1))

    store.swap_slots(session.session_id, 0, 3)
    tray = store.get_session(session.session_id).tray
    assert tray[0] is None
    assert tray[3].item_id == "item-1"

    with pytest.raises(TrayItemNotFoundError):
        store.swap_slots(session.session_id, 0, 9)


# ─── API Smoke Tests ─────────────────────────────────────────────────────────
# ASGITransport plus asgi_lifespan so the FastAPI lifespan runs
# (which calls init_session_store()).

from contextlib import asynccontextmanager
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager


@asynccontextmanager
async def lifespan_client():
    """
    Spin up the full FastAPI app including its lifespan (startup/shutdown),
    then yield an AsyncClient pointed at it.
    """
    import os
    os.environ["LOG_LEVEL"] = "WARNING"

    from screenframe.config import get_settings
    get_settings.cache_clear()

    from screenframe.main import create_app
    test_app = create_app()

    async with LifespanManager(test_app) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def _small_specs(monkeypatch):
    """Render captures at thumbnail size so API tests stay fast."""
    from screenframe.models.device import specs_for_platform

    def _shrunk(platform):
        return [
            s.model_copy(update={"width": s.width // 20, "height": s.height // 20})
            for s in specs_for_platform(platform)
        ]

    monkeypatch.setattr("screenframe.core.capture.specs_for_platform", _shrunk)


async def _upload(client, device="IPHONE", img=None):
    img = _make_bgr(400, 200) if img is None else img
    return await client.post(
        "/sessions",
        files={"file": ("shot.png", _png_bytes(img), "image/png")},
        data={"device": device},
    )


@pytest.mark.asyncio
async def test_health_endpoint():
    async with lifespan_client() as c:
        resp = await c.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "screenframe"


@pytest.mark.asyncio
async def test_devices_endpoint():
    async with lifespan_client() as c:
        resp = await c.get("/devices")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["devices"]) == 7
    assert "APPLE" in data["frame_colors"]


@pytest.mark.asyncio
async def test_session_not_found():
    async with lifespan_client() as c:
        resp = await c.get("/sessions/nonexistent-session")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_create_session_applies_apple_inset():
    async with lifespan_client() as c:
        resp = await _upload(c, device="IPHONE")
    assert resp.status_code == 201
    data = resp.json()
    assert data["view_class"] == "standard"
    assert data["applied_crop"]["x"] == pytest.approx(4.0)
    assert abs(data["master_width"] - 184) <= 1


@pytest.mark.asyncio
async def test_create_session_rejects_non_image():
    async with lifespan_client() as c:
        resp = await c.post(
            "/sessions",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "IMAGE_VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_create_session_rejects_corrupt_image():
    async with lifespan_client() as c:
        resp = await c.post(
            "/sessions",
            files={"file": ("shot.png", b"\x89PNG not really", "image/png")},
        )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "DECODE_FAILURE"


@pytest.mark.asyncio
async def test_patch_editor_and_preview():
    async with lifespan_client() as c:
        session_id = (await _upload(c, device="PHONE")).json()["session_id"]
        patch = await c.patch(
            f"/sessions/{session_id}/editor",
            json={"fit_mode": "STRETCH", "adjustments": {"brightness": 120}},
        )
        preview = await c.get(f"/sessions/{session_id}/preview/PHONE")

    assert patch.status_code == 200
    assert patch.json()["fit_mode"] == "STRETCH"
    assert preview.status_code == 200
    assert preview.headers["content-type"] == "image/png"
    img = cv2.imdecode(np.frombuffer(preview.content, np.uint8), cv2.IMREAD_UNCHANGED)
    assert img.shape == (1920, 1080, 4)


@pytest.mark.asyncio
async def test_patch_editor_rejects_bad_crop():
    async with lifespan_client() as c:
        session_id = (await _upload(c)).json()["session_id"]
        resp = await c.patch(
            f"/sessions/{session_id}/editor",
            json={"crop_area": {"x": 80, "y": 0, "width": 50, "height": 100}},
        )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_capture_download_and_remove(monkeypatch):
    _small_specs(monkeypatch)
    async with lifespan_client() as c:
        session_id = (await _upload(c, device="IPHONE")).json()["session_id"]

        first = await c.post(f"/sessions/{session_id}/capture")
        second = await c.post(f"/sessions/{session_id}/capture")
        assert first.status_code == 201
        assert second.status_code == 201

        item = second.json()["item"]
        filenames = [v["filename"] for v in item["variants"]]
        assert filenames == [
            "apple_phone_6.7_rect_02.png",
            "apple_phone_6.1_rect_02.png",
            "apple_tablet_12.9_rect_02.png",
        ]

        download = await c.get(
            f"/sessions/{session_id}/tray/{item['item_id']}/{filenames[0]}"
        )
        assert download.status_code == 200
        assert download.content.startswith(b"\x89PNG")

        missing = await c.get(f"/sessions/{session_id}/tray/{item['item_id']}/nope.png")
        assert missing.status_code == 404

        removed = await c.delete(f"/sessions/{session_id}/tray/{item['item_id']}")
        assert removed.status_code == 204

        tray = (await c.get(f"/sessions/{session_id}/tray")).json()["slots"]
    assert tray[0]["index"] == 1
    assert tray[1] is None


@pytest.mark.asyncio
async def test_swap_and_revise(monkeypatch):
    _small_specs(monkeypatch)
    async with lifespan_client() as c:
        session_id = (await _upload(c, device="PHONE")).json()["session_id"]
        item = (await c.post(f"/sessions/{session_id}/capture")).json()["item"]

        swap = await c.post(
            f"/sessions/{session_id}/tray/swap", json={"from_slot": 0, "to_slot": 5}
        )
        assert swap.status_code == 200
        assert swap.json()["slots"][5]["item_id"] == item["item_id"]

        revise = await c.post(f"/sessions/{session_id}/tray/{item['item_id']}/revise")
        state = (await c.get(f"/sessions/{session_id}")).json()

    assert revise.status_code == 200
    primary = item["variants"][0]
    assert revise.json()["master_width"] == primary["width"]
    assert revise.json()["master_height"] == primary["height"]
    assert state["editor"]["crop_area"] == {"x": 0.0, "y": 0.0, "width": 100.0, "height": 100.0}
    assert state["tray"][5]["item_id"] == item["item_id"]


@pytest.mark.asyncio
async def test_capture_tray_full(monkeypatch):
    _small_specs(monkeypatch)
    monkeypatch.setenv("TRAY_SLOTS", "1")
    async with lifespan_client() as c:
        session_id = (await _upload(c, device="PHONE")).json()["session_id"]
        ok = await c.post(f"/sessions/{session_id}/capture")
        full = await c.post(f"/sessions/{session_id}/capture")

    assert ok.status_code == 201
    assert full.status_code == 409
    assert full.json()["error"]["code"] == "TRAY_FULL"


@pytest.mark.asyncio
async def test_delete_session():
    async with lifespan_client() as c:
        session_id = (await _upload(c)).json()["session_id"]
        deleted = await c.delete(f"/sessions/{session_id}")
        again = await c.get(f"/sessions/{session_id}")
    assert deleted.status_code == 204
    assert again.status_code == 404
