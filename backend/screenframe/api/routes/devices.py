# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — GET /devices
Static device registry and chassis colour palette for client pickers.
"""

from __future__ import annotations

from fastapi import APIRouter

from screenframe.models.device import DEVICE_SPECS, FRAME_COLORS

router = APIRouter(tags=["devices"])


@router.get("/devices", summary="List target devices and frame colours")
async def list_devices() -> dict:
    return {
        "devices": [spec.model_dump(mode="json") for spec in DEVICE_SPECS.values()],
        "frame_colors": {
            platform.value: [color.model_dump() for color in colors]
            for platform, colors in FRAME_COLORS.items()
        },
    }
