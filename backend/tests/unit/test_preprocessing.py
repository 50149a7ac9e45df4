# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Border detection, upload validation and canonical normalisation tests.
No network, no files on disk: every image is built in numpy.
"""

import cv2
import numpy as np
import pytest


def _make_bgr(h=100, w=100, color=(255, 255, 255)) -> np.ndarray:
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:] = color
    return img


def _make_noise(h=400, w=200, seed=0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def _banded(h=100, w=100, top=20, bottom=80) -> np.ndarray:
    """White bands above `top` and from `bottom` down; noisy content between."""
    img = _make_bgr(h, w)
    img[top:bottom] = _make_noise(bottom - top, w)
    return img


def _png_bytes(img: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


# ─── Border Detector ─────────────────────────────────────────────────────────

def test_detect_borders_trims_top_and_bottom():
    from screenframe.modules.detection.border_detector import detect_borders
    crop = detect_borders(_banded(top=20, bottom=80), tolerance=5)
    assert crop.x == 0.0
    assert crop.width == 100.0
    assert crop.y == pytest.approx(20.0)
    assert crop.height == pytest.approx(60.0)


def test_detect_borders_ignores_left_and_right():
    from screenframe.modules.detection.border_detector import detect_borders
    img = _banded(top=10, bottom=90)
    img[:, :15] = 255
    crop = detect_borders(img, tolerance=5)
    assert crop.x == 0.0
    assert crop.width == 100.0


def test_detect_borders_uniform_image_does_not_throw():
    from screenframe.modules.detection.border_detector import detect_borders
    crop = detect_borders(_make_bgr(100, 100, color=(30, 60, 90)), tolerance=5)
    assert crop.x >= 0 and crop.y >= 0
    assert crop.width <= 100 and crop.height <= 100
    assert crop.height == pytest.approx(1.0)
    assert all(np.isfinite([crop.x, crop.y, crop.width, crop.height]))


def test_detect_borders_single_pixel():
    from screenframe.modules.detection.border_detector import detect_borders
    crop = detect_borders(_make_bgr(1, 1), tolerance=5)
    assert crop.is_full


def test_detect_borders_tolerance_is_strict():
    from screenframe.modules.detection.border_detector import detect_borders
    img = _banded(top=10, bottom=90)
    img[:3] = (200, 200, 200)
    img[3:5] = (204, 204, 204)     # 4 away from the corner colour: border
    img[5:10] = (205, 205, 205)    # 5 away: content
    crop = detect_borders(img, tolerance=5)
    assert crop.y == pytest.approx(5.0)


def test_detect_borders_ignores_alpha():
    from screenframe.modules.detection.border_detector import detect_borders
    bgra = cv2.cvtColor(_banded(top=25, bottom=75), cv2.COLOR_BGR2BGRA)
    bgra[:, :, 3] = np.random.default_rng(1).integers(0, 256, bgra.shape[:2])
    crop = detect_borders(bgra, tolerance=5)
    assert crop.y == pytest.approx(25.0)
    assert crop.height == pytest.approx(50.0)


def test_detect_borders_high_bit_depth():
    from screenframe.modules.detection.border_detector import detect_borders
    img = np.zeros((100, 50, 3), dtype=np.uint16)
    # 65535 sits one step from 0 if the channels wrap to 16-bit signed
    img[20:80] = 65535
    crop = detect_borders(img, tolerance=5)
    assert crop.y == pytest.approx(20.0)
    assert crop.height == pytest.approx(60.0)


def test_detect_borders_fails_open():
    from screenframe.modules.detection.border_detector import detect_borders
    assert detect_borders(None).is_full
    assert detect_borders(np.zeros((0, 0, 3), dtype=np.uint8)).is_full
    assert detect_borders(np.zeros((4, 4, 2), dtype=np.uint8)).is_full


def test_scan_bounds_never_crosses():
    from screenframe.modules.detection.border_detector import scan_bounds
    assert scan_bounds(np.array([True])) == (0, 0)
    assert scan_bounds(np.array([True, True, True])) == (2, 2)
    assert scan_bounds(np.array([True, False, False, True])) == (1, 2)


# ─── Upload Validator ────────────────────────────────────────────────────────

def test_validate_upload_returns_bgra():
    from screenframe.modules.preprocessing.validator import validate_upload
    img = validate_upload(_png_bytes(_make_noise(40, 30)), content_type="image/png")
    assert img.shape == (40, 30, 4)
    assert img.dtype == np.uint8


def test_validate_upload_rejects_content_type():
    from screenframe.api.middleware.error_handler import ImageValidationError
    from screenframe.modules.preprocessing.validator import validate_upload
    with pytest.raises(ImageValidationError, match="Unsupported file type"):
        validate_upload(_png_bytes(_make_noise(4, 4)), content_type="application/pdf")


def test_validate_upload_rejects_empty():
    from screenframe.api.middleware.error_handler import ImageValidationError
    from screenframe.modules.preprocessing.validator import validate_upload
    with pytest.raises(ImageValidationError, match="empty"):
        validate_upload(b"")


def test_validate_upload_rejects_oversize(monkeypatch):
    from screenframe.api.middleware.error_handler import ImageValidationError
    from screenframe.config import Settings
    from screenframe.modules.preprocessing.validator import validate_upload

    monkeypatch.setattr(
        "screenframe.modules.preprocessing.validator.get_settings",
        lambda: Settings(_env_file=None, upload_max_mb=0),
    )
    with pytest.raises(ImageValidationError, match="exceeds"):
        validate_upload(_png_bytes(_make_noise(4, 4)))


def test_decode_failure_is_validation_error():
    from screenframe.api.middleware.error_handler import DecodeFailure, ImageValidationError
    from screenframe.modules.preprocessing.validator import decode_image
    with pytest.raises(DecodeFailure) as exc:
        decode_image(b"definitely not pixels")
    assert isinstance(exc.value, ImageValidationError)


# ─── Platform Inset ──────────────────────────────────────────────────────────

def test_apple_standard_view_inset():
    from screenframe.models.device import Platform
    from screenframe.models.editing import CropArea
    from screenframe.models.master import ViewClass
    from screenframe.modules.preprocessing.normalizer import apply_platform_inset

    crop, view = apply_platform_inset(CropArea(x=1, y=0, width=98, height=100), Platform.APPLE)
    assert view == ViewClass.STANDARD
    assert crop.x == pytest.approx(1 + 98 * 0.04)
    assert crop.width == pytest.approx(98 * 0.92)
    assert crop.y == pytest.approx(4.0)
    assert crop.height == pytest.approx(92.0)


def test_apple_modal_view_inset():
    from screenframe.models.device import Platform
    from screenframe.models.editing import CropArea
    from screenframe.models.master import ViewClass
    from screenframe.modules.preprocessing.normalizer import apply_platform_inset

    crop, view = apply_platform_inset(CropArea(x=10, y=10, width=80, height=80), Platform.APPLE)
    assert view == ViewClass.MODAL
    assert crop.x == pytest.approx(16.4)
    assert crop.width == pytest.approx(67.2)


def test_standard_view_on_either_axis():
    from screenframe.models.editing import CropArea
    from screenframe.models.master import ViewClass
    from screenframe.modules.preprocessing.normalizer import classify_view

    assert classify_view(CropArea(x=0, y=20, width=100, height=60)) == ViewClass.STANDARD
    assert classify_view(CropArea(x=5, y=0, width=60, height=96)) == ViewClass.STANDARD
    assert classify_view(CropArea(x=5, y=5, width=90, height=90)) == ViewClass.MODAL


def test_android_crop_passes_through():
    from screenframe.models.device import Platform
    from screenframe.models.editing import CropArea
    from screenframe.models.master import ViewClass
    from screenframe.modules.preprocessing.normalizer import apply_platform_inset

    original = CropArea(x=0, y=12, width=100, height=70)
    crop, view = apply_platform_inset(original, Platform.ANDROID)
    assert crop == original
    assert view == ViewClass.NONE


# ─── Normalizer ──────────────────────────────────────────────────────────────

def test_normalize_extracts_at_native_scale():
    from screenframe.models.device import Platform
    from screenframe.modules.detection.border_detector import detect_borders
    from screenframe.modules.preprocessing.normalizer import normalize

    src = _banded(h=256, w=128, top=64, bottom=192)
    master = normalize(src, detect_borders(src, tolerance=5), Platform.ANDROID)

    assert master is not None
    assert master.size == (128, 128)
    assert master.source_size == (128, 256)
    assert master.pixels.shape == (128, 128, 4)
    np.testing.assert_array_equal(master.pixels[:, :, :3], src[64:192])


def test_normalize_apple_shrinks_master():
    from screenframe.models.device import Platform
    from screenframe.models.editing import CropArea
    from screenframe.models.master import ViewClass
    from screenframe.modules.preprocessing.normalizer import normalize

    src = _make_noise(400, 200)
    master = normalize(src, CropArea.full(), Platform.APPLE)

    assert master.view_class == ViewClass.STANDARD
    assert abs(master.width - 184) <= 1
    assert abs(master.height - 368) <= 1


def test_extract_region_truncates_fractional_offset():
    from screenframe.models.editing import CropArea
    from screenframe.modules.preprocessing.normalizer import extract_region

    src = _make_noise(10, 10)
    # 17.5% of 10px = 1.75px: the region starts on column and row 1
    region = extract_region(src, CropArea(x=17.5, y=17.5, width=50, height=50))
    assert region.shape == (5, 5, 4)
    np.testing.assert_array_equal(region[:, :, :3], src[1:6, 1:6])


def test_normalize_does_not_alias_source():
    from screenframe.models.device import Platform
    from screenframe.models.editing import CropArea
    from screenframe.modules.preprocessing.normalizer import normalize

    src = cv2.cvtColor(_make_noise(50, 50), cv2.COLOR_BGR2BGRA)
    master = normalize(src, CropArea.full(), Platform.ANDROID)
    src[:] = 0
    assert master.pixels.any()


def test_normalize_returns_none_without_raster():
    from screenframe.models.device import Platform
    from screenframe.models.editing import CropArea
    from screenframe.modules.preprocessing.normalizer import normalize

    # 0.5% of a 10px-tall image truncates to zero rows
    src = _make_noise(10, 10)
    crop = CropArea(x=0, y=0, width=100, height=0.5)
    assert normalize(src, crop, Platform.ANDROID) is None


def test_prepare_upload_end_to_end():
    from screenframe.models.device import Platform
    from screenframe.models.master import ViewClass
    from screenframe.modules.preprocessing.normalizer import prepare_upload

    data = _png_bytes(_banded(h=256, w=128, top=64, bottom=192))
    master = prepare_upload(data, Platform.ANDROID, content_type="image/png")
    assert master.size == (128, 128)
    assert master.view_class == ViewClass.NONE
    assert master.applied_crop.y == pytest.approx(25.0)


def test_prepare_upload_falls_back_to_source(monkeypatch):
    from screenframe.models.device import Platform
    from screenframe.modules.preprocessing.normalizer import prepare_upload

    monkeypatch.setattr(
        "screenframe.modules.preprocessing.normalizer.normalize",
        lambda *args, **kwargs: None,
    )
    master = prepare_upload(_png_bytes(_make_noise(30, 20)), Platform.APPLE)
    assert master.size == (20, 30)
    assert master.applied_crop.is_full
