# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Image I/O, Colour and Compositing Utilities
Shared helpers used by the detector, normalizer and compositor.
All pixel buffers follow the OpenCV convention: BGR(A) channel order.
Masters and final rasters are BGRA uint8; the compositor works on a
float32 BGR canvas in the 0–255 range and quantises once at the end.
"""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np
from PIL import ImageColor


BGR = tuple[float, float, float]


# ─── Decode / Encode ─────────────────────────────────────────────────────────

def bytes_to_bgra(data: bytes) -> np.ndarray:
    """
    Decode raw image bytes to a BGRA uint8 array.
    Grayscale and BGR inputs gain an opaque alpha channel.
    Raises ValueError if the bytes cannot be decoded.
    """
    if not data:
        raise ValueError("No image bytes to decode.")
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError("Could not decode image bytes.")
    return to_bgra(img)


def to_bgra(img: np.ndarray) -> np.ndarray:
    """Normalise a gray / BGR / BGRA array (any integer depth) to BGRA uint8."""
    if img.dtype == np.uint16:
        img = (img // 257).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2BGRA)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
    if channels == 4:
        return img
    raise ValueError(f"Unsupported channel count: {channels}")


def bgra_to_png_bytes(img: np.ndarray) -> bytes:
    """Encode a BGRA numpy array to PNG bytes (lossless)."""
    success, buf = cv2.imencode(".png", img)
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


# ─── Colour ──────────────────────────────────────────────────────────────────

def parse_color(value: str) -> BGR:
    """Parse a CSS colour string ('#1a1a1a', 'black', …) to a BGR float tuple."""
    rgb = ImageColor.getrgb(value)
    return float(rgb[2]), float(rgb[1]), float(rgb[0])


def mix(base: BGR, overlay: BGR, alpha: float) -> BGR:
    """Composite a flat overlay colour at the given opacity over base."""
    return tuple(b + (o - b) * alpha for b, o in zip(base, overlay))  # type: ignore[return-value]


# ─── Canvas ──────────────────────────────────────────────────────────────────

def allocate_canvas(width: int, height: int) -> np.ndarray:
    """
    Allocate a float32 BGR canvas.
    Raises MemoryError / ValueError when the surface cannot be created.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid canvas size {width}×{height}")
    return np.zeros((height, width, 3), dtype=np.float32)


def finalize_canvas(canvas: np.ndarray, alpha: np.ndarray | None = None) -> np.ndarray:
    """Quantise a float canvas to BGRA uint8 (opaque unless alpha is given)."""
    bgr = np.clip(np.rint(canvas), 0, 255).astype(np.uint8)
    h, w = bgr.shape[:2]
    if alpha is None:
        a = np.full((h, w, 1), 255, dtype=np.uint8)
    else:
        a = np.clip(np.rint(alpha * 255.0), 0, 255).astype(np.uint8)[:, :, np.newaxis]
    return np.concatenate([bgr, a], axis=2)


def linear_gradient(
    shape: tuple[int, int],
    start: tuple[float, float],
    end: tuple[float, float],
    stops: Sequence[tuple[float, BGR]],
) -> np.ndarray:
    """
    Render a linear gradient between two canvas points.

    Pixels project onto the start→end axis (at their centres) and take the
    piecewise-linear colour of the stop list; beyond either end the
    nearest stop colour extends.

    Returns:
        float32 (H, W, 3) BGR image
    """
    h, w = shape
    (x0, y0), (x1, y1) = start, end
    dx, dy = x1 - x0, y1 - y0
    denom = dx * dx + dy * dy

    xs = (np.arange(w, dtype=np.float64) + 0.5 - x0)[np.newaxis, :]
    ys = (np.arange(h, dtype=np.float64) + 0.5 - y0)[:, np.newaxis]
    if denom == 0:
        t = np.zeros((h, w), dtype=np.float64)
    else:
        t = np.clip((xs * dx + ys * dy) / denom, 0.0, 1.0)

    offsets = np.array([s[0] for s in stops], dtype=np.float64)
    out = np.empty((h, w, 3), dtype=np.float32)
    for c in range(3):
        values = np.array([s[1][c] for s in stops], dtype=np.float64)
        out[:, :, c] = np.interp(t, offsets, values)
    return out


def composite_over(
    canvas: np.ndarray,
    color: np.ndarray | BGR,
    coverage: np.ndarray,
    opacity: float = 1.0,
) -> None:
    """
    Source-over composite in place: canvas += (color - canvas) * coverage.
    color may be a flat BGR tuple or an (H, W, 3) image.
    """
    alpha = coverage if opacity == 1.0 else coverage * np.float32(opacity)
    rows = np.flatnonzero(alpha.any(axis=1))
    if rows.size == 0:
        return
    r0, r1 = int(rows[0]), int(rows[-1]) + 1
    a = alpha[r0:r1, :, np.newaxis]
    region = canvas[r0:r1]
    if isinstance(color, np.ndarray):
        src = color[r0:r1]
    else:
        src = np.asarray(color, dtype=np.float32)
    region += (src - region) * a
