# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Viewport Layout Policy
Pure functions holding every numeric policy of the compositor:

  1. Target content rect  — full canvas, Apple FIT breathing room,
                            or the FRAME bezel inset (FRAME wins)
  2. Source rect          — crop percentages resolved against the master
  3. Fit resolution       — FIT letterbox / AUTOFIT cover / STRETCH force,
                            with the Android-tablet height lock
  4. Chassis geometry     — body rect and corner radii for FRAME exports

All insets and radii are fractions of spec.width so phones and tablets
scale consistently. No rounding happens here: the rasteriser consumes
the float rectangles directly, which keeps left/right margins symmetric.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from screenframe.models.device import DeviceSpec, Platform
from screenframe.models.editing import CropArea, ExportMode, FitMode
from screenframe.utils.geometry_utils import Rect, full_canvas

# Fractions of spec.width
APPLE_BREATHING_ROOM = 0.04
FRAME_PADDING = 0.12
FRAME_PADDING_ANDROID_TABLET = 0.10
BEZEL_WIDTH = 0.04
BODY_RADIUS = 0.10
BODY_RADIUS_TABLET = 0.04
SCREEN_RADIUS = 0.08
SCREEN_RADIUS_TABLET = 0.03


@dataclass(frozen=True)
class ViewportLayout:
    """Every rectangle the compositor needs for one render."""
    canvas: Rect
    target: Rect
    source: Rect
    draw: Rect
    body: Optional[Rect]
    body_radius: float
    screen_radius: float
    height_locked: bool = False


# ─── Step 2: Target Content Rect ─────────────────────────────────────────────

def frame_padding(spec: DeviceSpec) -> float:
    if spec.platform == Platform.ANDROID and spec.is_tablet:
        return spec.width * FRAME_PADDING_ANDROID_TABLET
    return spec.width * FRAME_PADDING


def target_rect(spec: DeviceSpec, fit_mode: FitMode, export_mode: ExportMode) -> Rect:
    """
    Content rectangle inside the canvas.
    The FRAME inset is taken from the full canvas and replaces the Apple
    breathing room rather than compounding with it.
    """
    canvas = full_canvas(spec.width, spec.height)
    if export_mode == ExportMode.FRAME:
        return canvas.inset(frame_padding(spec))
    if spec.platform == Platform.APPLE and fit_mode == FitMode.FIT:
        return canvas.inset(spec.width * APPLE_BREATHING_ROOM)
    return canvas


# ─── Step 4: Source Sampling Rect ────────────────────────────────────────────

def source_rect(crop: CropArea, img_w: int, img_h: int) -> Rect:
    return Rect(*crop.to_pixels(img_w, img_h))


# ─── Step 5: Fit Resolution ──────────────────────────────────────────────────

def is_height_locked(spec: DeviceSpec, img_ratio: float, target_ratio: float) -> bool:
    """Android tablets anchor AUTOFIT on height when the source is narrower."""
    return (
        spec.platform == Platform.ANDROID
        and spec.is_tablet
        and img_ratio < target_ratio
    )


def resolve_fit(
    source: Rect,
    target: Rect,
    fit_mode: FitMode,
    spec: DeviceSpec,
) -> tuple[Rect, bool]:
    """
    Map the source rect's aspect ratio into the target rect.

    Returns:
        (draw_rect, height_locked)
    """
    img_ratio = source.ratio
    target_ratio = target.ratio

    draw_x, draw_y, draw_w, draw_h = target.as_tuple()

    if fit_mode == FitMode.FIT:
        if img_ratio > target_ratio:
            draw_h = target.w / img_ratio
            draw_y = target.y + (target.h - draw_h) / 2
        else:
            draw_w = target.h * img_ratio
            draw_x = target.x + (target.w - draw_w) / 2

    elif fit_mode == FitMode.AUTOFIT:
        if is_height_locked(spec, img_ratio, target_ratio):
            # Keeps UI elements the same visual scale as the phone render
            draw_h = target.h
            draw_w = target.h * img_ratio
            draw_x = target.x + (target.w - draw_w) / 2
            return Rect(draw_x, draw_y, draw_w, draw_h), True
        if img_ratio > target_ratio:
            draw_w = target.h * img_ratio
            draw_x = target.x + (target.w - draw_w) / 2
        else:
            draw_h = target.w / img_ratio
            draw_y = target.y + (target.h - draw_h) / 2

    # STRETCH: draw rect is the target rect as-is
    return Rect(draw_x, draw_y, draw_w, draw_h), False


# ─── Chassis Geometry ────────────────────────────────────────────────────────

def body_rect(target: Rect, spec: DeviceSpec) -> Rect:
    return target.expand(spec.width * BEZEL_WIDTH)


def body_radius(spec: DeviceSpec) -> float:
    return spec.width * (BODY_RADIUS_TABLET if spec.is_tablet else BODY_RADIUS)


def screen_radius(spec: DeviceSpec) -> float:
    return spec.width * (SCREEN_RADIUS_TABLET if spec.is_tablet else SCREEN_RADIUS)


# ─── Orchestrator ────────────────────────────────────────────────────────────

def compute_layout(
    spec: DeviceSpec,
    fit_mode: FitMode,
    export_mode: ExportMode,
    crop: CropArea,
    image_size: tuple[int, int],
) -> ViewportLayout:
    """
    Resolve every rectangle for one render.

    Args:
        spec:       Target device
        fit_mode:   FIT / STRETCH / AUTOFIT
        export_mode: RECTANGLE / FRAME
        crop:       Percent crop of the master
        image_size: (W, H) of the master in pixels
    """
    img_w, img_h = image_size
    target = target_rect(spec, fit_mode, export_mode)
    source = source_rect(crop, img_w, img_h)
    draw, height_locked = resolve_fit(source, target, fit_mode, spec)

    framed = export_mode == ExportMode.FRAME
    return ViewportLayout(
        canvas=full_canvas(spec.width, spec.height),
        target=target,
        source=source,
        draw=draw,
        body=body_rect(target, spec) if framed else None,
        body_radius=body_radius(spec),
        screen_radius=screen_radius(spec) if framed else 0.0,
        height_locked=height_locked,
    )
