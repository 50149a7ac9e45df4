# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Export Filenames
Store-kit naming convention:

    {platform}_{device}_{size}_{mode}_{NN}.png

e.g. apple_phone_6.7_rect_01.png, android_chromebook_mockup_03.png.
Empty segments (no size label) are dropped rather than left as "__".
"""

from __future__ import annotations

from screenframe.models.device import DeviceSpec
from screenframe.models.editing import ExportMode

MODE_LABELS: dict[ExportMode, str] = {
    ExportMode.RECTANGLE: "rect",
    ExportMode.FRAME: "mockup",
}


def export_filename(spec: DeviceSpec, mode: ExportMode, index: int) -> str:
    """Build the filename for one variant; index is the 1-based bucket counter."""
    segments = [
        spec.platform.value.lower(),
        spec.device_label,
        spec.size_label,
        MODE_LABELS[mode],
        f"{index:02d}",
    ]
    return "_".join(s for s in segments if s) + ".png"
