# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Unsharp Mask
3×3 Laplacian sharpening pass over the whole output canvas.
Colour channels only; alpha is copied through. The outermost 1px ring
of the canvas is never written: it keeps its pre-sharpen pixels
rather than being cleared to transparent black.
"""

from __future__ import annotations

import cv2
import numpy as np

# Sharpness slider (0–100) is divided by this to get the off-centre weight
_AMOUNT_DIVISOR = 300.0


def sharpen_kernel(amount: float) -> np.ndarray:
    a = amount / _AMOUNT_DIVISOR
    return np.array(
        [
            [0.0, -a, 0.0],
            [-a, 1.0 + 4.0 * a, -a],
            [0.0, -a, 0.0],
        ],
        dtype=np.float32,
    )


def apply_sharpness(raster: np.ndarray, amount: float) -> np.ndarray:
    """
    Sharpen a BGRA uint8 raster.

    Args:
        raster: BGRA uint8 (H × W × 4)
        amount: 0–100; 0 returns the input unchanged

    Returns:
        New BGRA uint8 array (or the input itself when amount ≤ 0)
    """
    if amount <= 0:
        return raster

    h, w = raster.shape[:2]
    out = raster.copy()
    if h < 3 or w < 3:
        return out

    bgr = raster[:, :, :3].astype(np.float32)
    filtered = cv2.filter2D(bgr, cv2.CV_32F, sharpen_kernel(amount))
    interior = filtered[1:-1, 1:-1]
    out[1:-1, 1:-1, :3] = np.clip(np.rint(interior), 0, 255).astype(np.uint8)
    return out
