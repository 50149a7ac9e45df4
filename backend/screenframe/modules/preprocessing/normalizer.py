# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Canonical Normalizer
Runs once per upload, before any crop or adjustment edits:

  1. Border detection  — trim uniform top/bottom bands
  2. Platform inset    — Apple only: pull the crop in by 4% ("standard"
                         view, content reaches ≥95% of the source on an
                         axis) or 8% ("modal" view, content already framed),
                         measured on the crop's own width/height
  3. Extraction        — resolve the percent crop to whole pixels and copy
                         that region 1:1 into a fresh read-only buffer
                         (fractional offsets are truncated, not resampled,
                         so a sub-pixel crop lands up to 1px up-left)

The resulting CanonicalMaster replaces the upload for every later render.
If no buffer can be produced the normalizer returns None and the caller
promotes the raw upload to master instead.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from screenframe.api.middleware.error_handler import NoRenderContext
from screenframe.models.device import Platform
from screenframe.models.editing import CropArea
from screenframe.models.master import CanonicalMaster, ViewClass
from screenframe.modules.detection.border_detector import detect_borders
from screenframe.modules.preprocessing.validator import validate_upload
from screenframe.utils.image_utils import to_bgra
from screenframe.utils.logger import get_logger

log = get_logger(__name__)

STANDARD_VIEW_THRESHOLD = 95.0
STANDARD_INSET = 0.04
MODAL_INSET = 0.08


# ─── Step 2: Platform Inset ──────────────────────────────────────────────────

def classify_view(crop: CropArea) -> ViewClass:
    if crop.width >= STANDARD_VIEW_THRESHOLD or crop.height >= STANDARD_VIEW_THRESHOLD:
        return ViewClass.STANDARD
    return ViewClass.MODAL


def apply_platform_inset(crop: CropArea, platform: Platform) -> tuple[CropArea, ViewClass]:
    """
    Inset a detected crop symmetrically for the Apple ecosystem.
    Android crops pass through untouched.
    """
    if platform != Platform.APPLE:
        return crop, ViewClass.NONE

    view = classify_view(crop)
    factor = STANDARD_INSET if view == ViewClass.STANDARD else MODAL_INSET
    inset_w = crop.width * factor
    inset_h = crop.height * factor
    inset = CropArea(
        x=crop.x + inset_w,
        y=crop.y + inset_h,
        width=crop.width - inset_w * 2,
        height=crop.height - inset_h * 2,
    )
    return inset, view


# ─── Step 3: Extraction ──────────────────────────────────────────────────────

def extract_region(source: np.ndarray, crop: CropArea) -> np.ndarray:
    """
    Copy the crop region out of source at 1:1 scale.
    Offsets and sizes are truncated to whole pixels, then clamped.

    Raises:
        NoRenderContext: the region resolves to zero pixels
    """
    img_h, img_w = source.shape[:2]
    sx, sy, sw, sh = crop.to_pixels(img_w, img_h)
    x0 = min(int(sx), img_w)
    y0 = min(int(sy), img_h)
    x1 = min(x0 + int(sw), img_w)
    y1 = min(y0 + int(sh), img_h)
    if x1 <= x0 or y1 <= y0:
        raise NoRenderContext(
            f"Crop {crop.model_dump()} resolves to an empty region of a {img_w}×{img_h} image"
        )
    return np.ascontiguousarray(to_bgra(source)[y0:y1, x0:x1]).copy()


# ─── Public API ──────────────────────────────────────────────────────────────

def normalize(
    source: np.ndarray,
    detected_crop: CropArea,
    platform: Platform,
) -> Optional[CanonicalMaster]:
    """
    Build the canonical master from a decoded upload.

    Args:
        source:        Decoded upload (gray / BGR / BGRA)
        detected_crop: Output of detect_borders(source)
        platform:      Ecosystem of the currently selected device

    Returns:
        CanonicalMaster, or None when no raster could be produced
    """
    crop, view = apply_platform_inset(detected_crop, platform)
    try:
        pixels = extract_region(source, crop)
    except (NoRenderContext, MemoryError) as e:
        log.warning(
            "normalize_no_raster",
            platform=platform.value,
            crop=crop.model_dump(),
            error=str(e),
        )
        return None

    master = CanonicalMaster(
        pixels=pixels,
        platform=platform,
        applied_crop=crop,
        view_class=view,
        source_size=(int(source.shape[1]), int(source.shape[0])),
    )
    log.info(
        "master_normalized",
        platform=platform.value,
        view_class=view.value,
        source_size=master.source_size,
        master_size=master.size,
    )
    return master


def master_from_source(source: np.ndarray, platform: Platform) -> CanonicalMaster:
    """Fallback: promote the raw upload to master unchanged."""
    return CanonicalMaster(
        pixels=np.ascontiguousarray(to_bgra(source)).copy(),
        platform=platform,
        applied_crop=CropArea.full(),
        view_class=ViewClass.NONE,
        source_size=(int(source.shape[1]), int(source.shape[0])),
    )


def prepare_upload(
    data: bytes,
    platform: Platform,
    content_type: Optional[str] = None,
) -> CanonicalMaster:
    """
    Upload → validate → detect borders → normalize (→ raw fallback).

    Raises:
        ImageValidationError / DecodeFailure from validation
    """
    source = validate_upload(data, content_type=content_type)
    detected = detect_borders(source)
    master = normalize(source, detected, platform)
    if master is None:
        log.warning("normalize_fallback_to_source", platform=platform.value)
        master = master_from_source(source, platform)
    return master
