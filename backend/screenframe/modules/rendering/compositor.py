# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Viewport Compositor
Renders the canonical master into one device's export raster. The live
preview and the final export both call render(), so what the user sees
is byte-for-byte what ships.

Pipeline (per render):
  1. Background fill   — flat #050505 (RECTANGLE) or dark diagonal gradient (FRAME)
  2. Layout            — target / source / draw rects from layout.compute_layout
  3. Chassis           — FRAME only, see chassis.render_chassis
  4. Content           — tonal filters on the sampled source rect, resampled
                         into the draw rect, clipped to the rounded screen
                         shape in FRAME mode
  5. Sharpen           — whole-canvas unsharp mask when sharpness > 0
  6. Encode            — lossless PNG

The function holds no state between calls and never writes to the
master, so concurrent renders of the same master are safe.
"""

from __future__ import annotations

import math
import time
from typing import Optional, Union

import cv2
import numpy as np

from screenframe.api.middleware.error_handler import (
    DecodeFailure,
    EncodeFailure,
    NoRenderContext,
)
from screenframe.config import get_settings
from screenframe.models.device import DeviceSpec
from screenframe.models.editing import CropArea, ExportMode, FitMode, ImageAdjustments
from screenframe.models.master import CanonicalMaster
from screenframe.modules.rendering.adjustments import apply_adjustments
from screenframe.modules.rendering.chassis import render_chassis
from screenframe.modules.rendering.layout import ViewportLayout, compute_layout
from screenframe.modules.rendering.sharpen import apply_sharpness
from screenframe.utils.geometry_utils import Rect, rounded_rect_coverage
from screenframe.utils.image_utils import (
    allocate_canvas,
    bgra_to_png_bytes,
    bytes_to_bgra,
    composite_over,
    finalize_canvas,
    linear_gradient,
    parse_color,
    to_bgra,
)
from screenframe.utils.logger import get_logger

log = get_logger(__name__)

MasterSource = Union[CanonicalMaster, np.ndarray, bytes]

_RECT_BACKGROUND = "#050505"
_FRAME_BACKGROUND_START = "#0a0a0a"
_FRAME_BACKGROUND_END = "#000000"


# ─── Input ───────────────────────────────────────────────────────────────────

def _master_pixels(master: MasterSource) -> np.ndarray:
    """Return the master as BGRA uint8 without copying when possible."""
    if isinstance(master, CanonicalMaster):
        return master.pixels
    if isinstance(master, (bytes, bytearray, memoryview)):
        try:
            return bytes_to_bgra(bytes(master))
        except ValueError as e:
            raise DecodeFailure(f"Load error: {e}") from e
    if isinstance(master, np.ndarray) and master.size > 0:
        return to_bgra(master)
    raise DecodeFailure("Load error: source is not a decodable image.")


# ─── Step 1: Background ──────────────────────────────────────────────────────

def _new_canvas(spec: DeviceSpec, export_mode: ExportMode) -> np.ndarray:
    try:
        canvas = allocate_canvas(spec.width, spec.height)
    except (MemoryError, ValueError) as e:
        raise NoRenderContext(
            f"Could not allocate a {spec.width}×{spec.height} canvas: {e}"
        ) from e

    if export_mode == ExportMode.FRAME:
        canvas[:] = linear_gradient(
            canvas.shape[:2],
            start=(0.0, 0.0),
            end=(float(spec.width), float(spec.height)),
            stops=[
                (0.0, parse_color(_FRAME_BACKGROUND_START)),
                (1.0, parse_color(_FRAME_BACKGROUND_END)),
            ],
        )
    else:
        canvas[:] = parse_color(_RECT_BACKGROUND)
    return canvas


# ─── Step 4: Content ─────────────────────────────────────────────────────────

def _sample_source(
    pixels: np.ndarray,
    source: Rect,
) -> tuple[np.ndarray, float, float]:
    """
    Slice the integer pixel window covering the source rect.
    Returns (window_bgra_float32, frac_x, frac_y) where frac_* is the
    sub-pixel offset of the source rect inside the window.
    """
    img_h, img_w = pixels.shape[:2]
    x0 = min(max(int(math.floor(source.x)), 0), img_w - 1)
    y0 = min(max(int(math.floor(source.y)), 0), img_h - 1)
    x1 = min(max(int(math.ceil(source.right)), x0 + 1), img_w)
    y1 = min(max(int(math.ceil(source.bottom)), y0 + 1), img_h)
    window = pixels[y0:y1, x0:x1].astype(np.float32)
    return window, source.x - x0, source.y - y0


def _draw_content(
    canvas: np.ndarray,
    pixels: np.ndarray,
    layout: ViewportLayout,
    adjustments: ImageAdjustments,
) -> None:
    """Resample the filtered source rect into the draw rect and composite."""
    h, w = canvas.shape[:2]
    source, draw = layout.source, layout.draw
    if source.is_empty() or draw.is_empty():
        return

    window, frac_x, frac_y = _sample_source(pixels, source)
    window[:, :, :3] = apply_adjustments(window[:, :, :3], adjustments)

    scale_x = draw.w / source.w
    scale_y = draw.h / source.h

    # Downscale with area averaging first so large sources do not alias
    win_h, win_w = window.shape[:2]
    new_w = win_w if scale_x >= 1 else max(1, int(round(win_w * scale_x)))
    new_h = win_h if scale_y >= 1 else max(1, int(round(win_h * scale_y)))
    if (new_w, new_h) != (win_w, win_h):
        window = cv2.resize(window, (new_w, new_h), interpolation=cv2.INTER_AREA)
    step_x = win_w / new_w
    step_y = win_h / new_h

    # Pixel-centre affine map: window index → canvas index
    matrix = np.array(
        [
            [scale_x * step_x, 0.0, draw.x + (0.5 * step_x - frac_x) * scale_x - 0.5],
            [0.0, scale_y * step_y, draw.y + (0.5 * step_y - frac_y) * scale_y - 0.5],
        ],
        dtype=np.float64,
    )
    warped = cv2.warpAffine(
        window,
        matrix,
        (w, h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_REPLICATE,
    )

    coverage = rounded_rect_coverage((h, w), draw)
    if layout.body is not None:
        coverage *= rounded_rect_coverage((h, w), layout.target, layout.screen_radius)
    coverage *= np.clip(warped[:, :, 3], 0.0, 255.0) / np.float32(255.0)

    composite_over(canvas, warped[:, :, :3], coverage)


# ─── Public API ──────────────────────────────────────────────────────────────

def compose(
    master: MasterSource,
    spec: DeviceSpec,
    fit_mode: FitMode,
    export_mode: ExportMode,
    adjustments: ImageAdjustments,
    crop_area: CropArea,
    chassis_color: Optional[str] = None,
) -> np.ndarray:
    """
    Composite one device raster.

    Returns:
        BGRA uint8 array of exactly (spec.height, spec.width, 4)

    Raises:
        DecodeFailure:   master bytes/array cannot be decoded
        NoRenderContext: output canvas could not be allocated
    """
    pixels = _master_pixels(master)
    img_h, img_w = pixels.shape[:2]

    canvas = _new_canvas(spec, export_mode)
    layout = compute_layout(spec, fit_mode, export_mode, crop_area, (img_w, img_h))

    if layout.body is not None:
        render_chassis(
            canvas,
            spec,
            layout.body,
            layout.body_radius,
            chassis_color or get_settings().default_frame_color,
        )

    _draw_content(canvas, pixels, layout, adjustments)

    raster = finalize_canvas(canvas)
    return apply_sharpness(raster, adjustments.sharpness)


def render(
    master: MasterSource,
    spec: DeviceSpec,
    fit_mode: FitMode,
    export_mode: ExportMode,
    adjustments: ImageAdjustments,
    crop_area: CropArea,
    chassis_color: Optional[str] = None,
) -> bytes:
    """
    Composite one device raster and encode it as PNG.

    Raises:
        DecodeFailure:   LoadError — source could not be decoded
        NoRenderContext: output canvas could not be allocated
        EncodeFailure:   ProcessingFailed — PNG encoding yielded no output
    """
    t0 = time.perf_counter()
    raster = compose(
        master, spec, fit_mode, export_mode, adjustments, crop_area, chassis_color
    )
    try:
        png = bgra_to_png_bytes(raster)
    except (RuntimeError, cv2.error) as e:
        raise EncodeFailure(f"Processing failed for {spec.id.value}: {e}") from e
    if not png:
        raise EncodeFailure(f"Processing failed for {spec.id.value}: empty output")

    log.debug(
        "render_complete",
        device=spec.id.value,
        fit_mode=fit_mode.value,
        export_mode=export_mode.value,
        size_bytes=len(png),
        elapsed_ms=round((time.perf_counter() - t0) * 1000, 1),
    )
    return png
