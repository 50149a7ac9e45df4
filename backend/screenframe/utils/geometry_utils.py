# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Geometry Utilities
Float rectangles and anti-aliased shape coverage masks shared by the
compositor and the chassis renderer.

Coverage is computed analytically from the signed distance to the shape
outline, sampled at pixel centres (i + 0.5). A pixel fully inside gets
1.0, fully outside 0.0, and pixels straddling the edge get a linear ramp
over one pixel. Results are deterministic for a given input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


# ─── Rectangles ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in canvas pixels (floats, not rounded)."""
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def ratio(self) -> float:
        return self.w / self.h

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.w / 2.0, self.y + self.h / 2.0

    def inset(self, d: float) -> "Rect":
        """Shrink by d on every side (negative d expands)."""
        return Rect(self.x + d, self.y + d, self.w - 2 * d, self.h - 2 * d)

    def expand(self, d: float) -> "Rect":
        return self.inset(-d)

    def offset(self, dx: float = 0.0, dy: float = 0.0) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.w, self.h)

    def is_empty(self) -> bool:
        return self.w <= 0 or self.h <= 0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.w, self.h


def full_canvas(width: int, height: int) -> Rect:
    return Rect(0.0, 0.0, float(width), float(height))


# ─── Coverage Masks ──────────────────────────────────────────────────────────

def rounded_rect_coverage(
    shape: tuple[int, int],
    rect: Rect,
    radius: float = 0.0,
) -> np.ndarray:
    """
    Anti-aliased coverage of a rounded rectangle.

    Args:
        shape:  (H, W) of the canvas
        rect:   Rectangle in canvas pixels
        radius: Corner radius; clamped to half the shorter side

    Returns:
        float32 (H, W) mask in [0, 1]
    """
    h, w = shape
    mask = np.zeros((h, w), dtype=np.float32)
    if rect.is_empty():
        return mask

    r = min(max(radius, 0.0), rect.w / 2.0, rect.h / 2.0)

    # Only evaluate the bounding box (+1px for the AA ramp)
    x0 = max(0, int(math.floor(rect.x)) - 1)
    y0 = max(0, int(math.floor(rect.y)) - 1)
    x1 = min(w, int(math.ceil(rect.right)) + 1)
    y1 = min(h, int(math.ceil(rect.bottom)) + 1)
    if x0 >= x1 or y0 >= y1:
        return mask

    cx, cy = rect.center
    xs = np.arange(x0, x1, dtype=np.float64) + 0.5
    ys = np.arange(y0, y1, dtype=np.float64) + 0.5
    qx = (np.abs(xs - cx) - (rect.w / 2.0 - r))[np.newaxis, :]
    qy = (np.abs(ys - cy) - (rect.h / 2.0 - r))[:, np.newaxis]

    outside = np.sqrt(np.maximum(qx, 0.0) ** 2 + np.maximum(qy, 0.0) ** 2)
    inside = np.minimum(np.maximum(qx, qy), 0.0)
    dist = outside + inside - r

    mask[y0:y1, x0:x1] = np.clip(0.5 - dist, 0.0, 1.0)
    return mask


def circle_coverage(
    shape: tuple[int, int],
    cx: float,
    cy: float,
    radius: float,
) -> np.ndarray:
    """Anti-aliased coverage of a filled circle."""
    box = Rect(cx - radius, cy - radius, 2 * radius, 2 * radius)
    return rounded_rect_coverage(shape, box, radius)


def ring_coverage(
    shape: tuple[int, int],
    rect: Rect,
    radius: float,
    line_width: float,
) -> np.ndarray:
    """Coverage of a stroke of line_width centred on a rounded-rect outline."""
    half = line_width / 2.0
    outer = rounded_rect_coverage(shape, rect.expand(half), radius + half)
    inner = rounded_rect_coverage(shape, rect.inset(half), max(radius - half, 0.0))
    return np.clip(outer - inner, 0.0, 1.0)
