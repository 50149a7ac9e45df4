# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Tonal Filter Chain
Applies brightness → contrast → saturate with CSS filter-function
semantics (percentages, 100 = identity), clamping to the displayable
range after every stage exactly as a browser compositor does. This is
what the editor preview shows, so exports must match it.
"""

from __future__ import annotations

import cv2
import numpy as np

from screenframe.models.editing import ImageAdjustments

# Rec. 709 luma weights used by the CSS saturate() matrix (RGB order)
_LUMA_R = 0.213
_LUMA_G = 0.715
_LUMA_B = 0.072


def saturation_matrix(amount: float) -> np.ndarray:
    """3×3 saturate() matrix for BGR pixel vectors."""
    s = amount
    rgb = np.array(
        [
            [_LUMA_R + (1 - _LUMA_R) * s, _LUMA_G - _LUMA_G * s, _LUMA_B - _LUMA_B * s],
            [_LUMA_R - _LUMA_R * s, _LUMA_G + (1 - _LUMA_G) * s, _LUMA_B - _LUMA_B * s],
            [_LUMA_R - _LUMA_R * s, _LUMA_G - _LUMA_G * s, _LUMA_B + (1 - _LUMA_B) * s],
        ],
        dtype=np.float32,
    )
    # Reverse rows and columns: RGB→BGR on both input and output side
    return np.ascontiguousarray(rgb[::-1, ::-1])


def apply_adjustments(bgr: np.ndarray, adjustments: ImageAdjustments) -> np.ndarray:
    """
    Apply the tonal chain to a float32 BGR image in the 0–255 range.
    Returns a new array; the input is not modified.
    Sharpness is not handled here: it runs on the whole canvas afterwards.
    """
    out = bgr.astype(np.float32, copy=True)
    if adjustments.is_tonal_neutral:
        return out

    if adjustments.brightness != 100:
        out *= np.float32(adjustments.brightness / 100.0)
        np.clip(out, 0.0, 255.0, out=out)

    if adjustments.contrast != 100:
        c = adjustments.contrast / 100.0
        out *= np.float32(c)
        out += np.float32(255.0 * (0.5 - 0.5 * c))
        np.clip(out, 0.0, 255.0, out=out)

    if adjustments.saturation != 100:
        out = cv2.transform(out, saturation_matrix(adjustments.saturation / 100.0))
        np.clip(out, 0.0, 255.0, out=out)

    return out
