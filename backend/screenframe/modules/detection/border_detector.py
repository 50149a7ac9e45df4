# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Uniform Border Detector
Finds solid-colour bands at the top and bottom of a screenshot and
returns the remaining content area as a percentage CropArea.

The reference edge colour is the top-left pixel. A row is uniform when
every pixel's B, G and R channels each differ from it by less than the
tolerance (alpha is ignored). Rows are consumed from the top while
uniform, then from the bottom while uniform, never crossing each other.
Left and right edges are not trimmed.

Fails open: anything that is not a usable raster yields the full-frame
crop so an upload is never blocked.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from screenframe.config import get_settings
from screenframe.models.editing import CropArea
from screenframe.utils.logger import get_logger

log = get_logger(__name__)


def _colour_view(image: np.ndarray) -> Optional[np.ndarray]:
    """Return an (H, W, C≤3) int32 copy of the colour channels, or None."""
    if image.ndim == 2:
        return image[:, :, np.newaxis].astype(np.int32)
    if image.ndim == 3 and image.shape[2] in (1, 3, 4):
        return image[:, :, :3].astype(np.int32)
    return None


def uniform_rows(image: np.ndarray, tolerance: int) -> np.ndarray:
    """
    Boolean (H,) array: True where the whole row matches the top-left colour.
    """
    colours = _colour_view(image)
    if colours is None:
        raise ValueError(f"Unsupported image shape {image.shape}")
    edge = colours[0, 0]
    matches = np.abs(colours - edge) < tolerance
    return matches.all(axis=(1, 2))


def scan_bounds(rows: np.ndarray) -> tuple[int, int]:
    """
    Walk inward from both ends over a row-uniformity mask.
    Returns (top, bottom) row indices of the content band, top ≤ bottom.
    """
    top, bottom = 0, len(rows) - 1
    while top < bottom and rows[top]:
        top += 1
    while bottom > top and rows[bottom]:
        bottom -= 1
    return top, bottom


def detect_borders(image: Optional[np.ndarray], tolerance: Optional[int] = None) -> CropArea:
    """
    Detect uniform top/bottom borders.

    Args:
        image:     Decoded bitmap (gray, BGR or BGRA), H and W ≥ 1
        tolerance: Per-channel match threshold; defaults to settings.border_tolerance

    Returns:
        CropArea in percent. Degenerate single-row crops are possible for
        fully uniform images; fields always satisfy x, y ≥ 0 and
        width, height ≤ 100.
    """
    if image is None or not isinstance(image, np.ndarray) or image.size == 0:
        log.warning("border_detect_no_raster")
        return CropArea.full()

    if _colour_view(image) is None:
        log.warning("border_detect_unsupported_shape", shape=image.shape)
        return CropArea.full()

    if tolerance is None:
        tolerance = get_settings().border_tolerance

    h, w = image.shape[:2]
    top, bottom = scan_bounds(uniform_rows(image, tolerance))
    left, right = 0, w - 1

    crop = CropArea(
        x=left / w * 100.0,
        y=top / h * 100.0,
        width=(right - left + 1) / w * 100.0,
        height=(bottom - top + 1) / h * 100.0,
    )
    log.debug(
        "border_detected",
        image_size=(w, h),
        top=top,
        bottom=bottom,
        crop=crop.model_dump(),
    )
    return crop
