# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Device Chassis Renderer
Draws the device body around the content viewport for FRAME exports:

  1. Drop shadow   — body silhouette, black at 80%, blurred and offset down
  2. Body          — rounded rect, left→right gradient chassis → tint → chassis
                     (Apple tint lightens, Android tint darkens)
  3. Outline       — hairline stroke on the body edge
  4. Sensor        — portrait phones only: Apple dynamic-island pill or
                     Android punch-hole camera near the top of the body

Called by the compositor before the content is drawn, so the content
viewport paints over the body interior.
"""

from __future__ import annotations

import math

import cv2
import numpy as np

from screenframe.models.device import DeviceSpec, Platform
from screenframe.utils.geometry_utils import (
    Rect,
    circle_coverage,
    ring_coverage,
    rounded_rect_coverage,
)
from screenframe.utils.image_utils import (
    BGR,
    composite_over,
    linear_gradient,
    mix,
    parse_color,
)
from screenframe.utils.logger import get_logger

log = get_logger(__name__)

# Shadow (fractions of spec.width)
_SHADOW_OPACITY = 0.8
_SHADOW_BLUR = 0.10
_SHADOW_OFFSET_Y = 0.04
# Shadow is blurred on a reduced grid once sigma exceeds this many pixels
_SHADOW_MAX_SIGMA_FULLRES = 8.0

# Midpoint tints, as (colour, opacity) laid over the chassis colour
_APPLE_TINT = ((255.0, 255.0, 255.0), 0x22 / 255.0)
_ANDROID_TINT = ((0.0, 0.0, 0.0), 0x11 / 255.0)

_OUTLINE_WIDTH = 0.004
_APPLE_OUTLINE = ((255.0, 255.0, 255.0), 0x11 / 255.0)
_ANDROID_OUTLINE = ((0.0, 0.0, 0.0), 0x11 / 255.0)

# Sensor geometry (fractions of the body rect)
_ISLAND_WIDTH = 0.22
_ISLAND_HEIGHT = 0.016
_SENSOR_TOP = 0.024
_CAMERA_DIAMETER = 0.05
_ISLAND_COLOUR: BGR = (0.0, 0.0, 0.0)
_CAMERA_COLOUR: BGR = (8.0, 8.0, 8.0)


def _blur_mask(mask: np.ndarray, sigma: float) -> np.ndarray:
    """
    Gaussian-blur a coverage mask. Large sigmas run on a downsampled grid
    and are resized back, which is visually identical for soft shadows.
    """
    if sigma <= 0:
        return mask
    h, w = mask.shape
    factor = max(1, int(sigma // _SHADOW_MAX_SIGMA_FULLRES))
    if factor == 1:
        return cv2.GaussianBlur(mask, (0, 0), sigma)

    small_w = max(1, math.ceil(w / factor))
    small_h = max(1, math.ceil(h / factor))
    small = cv2.resize(mask, (small_w, small_h), interpolation=cv2.INTER_AREA)
    small = cv2.GaussianBlur(small, (0, 0), sigma / factor)
    return cv2.resize(small, (w, h), interpolation=cv2.INTER_LINEAR)


def draw_shadow(canvas: np.ndarray, spec: DeviceSpec, body: Rect, radius: float) -> None:
    shape = canvas.shape[:2]
    silhouette = rounded_rect_coverage(
        shape, body.offset(dy=spec.width * _SHADOW_OFFSET_Y), radius
    )
    # Canvas shadowBlur maps to a Gaussian with sigma = blur / 2
    blurred = _blur_mask(silhouette, spec.width * _SHADOW_BLUR / 2.0)
    composite_over(canvas, (0.0, 0.0, 0.0), blurred, opacity=_SHADOW_OPACITY)


def chassis_midpoint(chassis: BGR, platform: Platform) -> BGR:
    tint, opacity = _APPLE_TINT if platform == Platform.APPLE else _ANDROID_TINT
    return mix(chassis, tint, opacity)


def draw_body(
    canvas: np.ndarray,
    spec: DeviceSpec,
    body: Rect,
    radius: float,
    chassis: BGR,
) -> None:
    shape = canvas.shape[:2]
    coverage = rounded_rect_coverage(shape, body, radius)
    gradient = linear_gradient(
        shape,
        start=(body.x, body.y),
        end=(body.right, body.y),
        stops=[
            (0.0, chassis),
            (0.5, chassis_midpoint(chassis, spec.platform)),
            (1.0, chassis),
        ],
    )
    composite_over(canvas, gradient, coverage)

    outline_colour, outline_opacity = (
        _APPLE_OUTLINE if spec.platform == Platform.APPLE else _ANDROID_OUTLINE
    )
    ring = ring_coverage(shape, body, radius, spec.width * _OUTLINE_WIDTH)
    composite_over(canvas, outline_colour, ring, opacity=outline_opacity)


def draw_sensor(canvas: np.ndarray, spec: DeviceSpec, body: Rect) -> None:
    """Dynamic island (Apple) or camera cutout (Android) on portrait phones."""
    if spec.is_tablet or not spec.is_portrait:
        return

    shape = canvas.shape[:2]
    top = body.y + body.h * _SENSOR_TOP

    if spec.platform == Platform.APPLE:
        island_w = body.w * _ISLAND_WIDTH
        island_h = body.h * _ISLAND_HEIGHT
        island = Rect(body.x + (body.w - island_w) / 2, top, island_w, island_h)
        coverage = rounded_rect_coverage(shape, island, island_h / 2)
        composite_over(canvas, _ISLAND_COLOUR, coverage)
    else:
        diameter = body.w * _CAMERA_DIAMETER
        cx = body.x + body.w / 2
        cy = top + diameter / 2
        coverage = circle_coverage(shape, cx, cy, diameter / 2)
        composite_over(canvas, _CAMERA_COLOUR, coverage)


def render_chassis(
    canvas: np.ndarray,
    spec: DeviceSpec,
    body: Rect,
    radius: float,
    chassis_color: str,
) -> None:
    """
    Draw the complete device body onto a float32 BGR canvas in place.

    Args:
        canvas:        float32 (H × W × 3) canvas, already background-filled
        spec:          Target device (drives tint, sensor style and scale)
        body:          Body rect (target content rect + bezel)
        radius:        Body corner radius in pixels
        chassis_color: CSS colour string of the chassis finish
    """
    chassis = parse_color(chassis_color)
    draw_shadow(canvas, spec, body, radius)
    draw_body(canvas, spec, body, radius, chassis)
    draw_sensor(canvas, spec, body)
    log.debug(
        "chassis_drawn",
        device=spec.id.value,
        chassis_color=chassis_color,
        body=[round(v, 2) for v in body.as_tuple()],
    )
