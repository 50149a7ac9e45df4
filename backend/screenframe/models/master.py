# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Canonical Master Image
The normalised pixel buffer established once per upload. Every
per-device render reads from it; nothing writes to it after creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from screenframe.models.device import Platform
from screenframe.models.editing import CropArea


class ViewClass(str, Enum):
    """How the Apple inset policy classified the detected content."""
    STANDARD = "standard"   # content fills ≥95% of the source on an axis
    MODAL = "modal"         # content already framed (dialogs, sheets)
    NONE = "none"           # no platform inset applied


@dataclass(frozen=True)
class CanonicalMaster:
    """
    Immutable master buffer.

    pixels:       BGRA uint8 (H × W × 4), flagged read-only
    platform:     Ecosystem whose inset policy produced this buffer
    applied_crop: Crop (percent of the upload) that was extracted
    view_class:   Inset classification
    source_size:  (W, H) of the raw upload
    """
    pixels: np.ndarray
    platform: Platform
    applied_crop: CropArea
    view_class: ViewClass
    source_size: tuple[int, int]

    def __post_init__(self) -> None:
        self.pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height
