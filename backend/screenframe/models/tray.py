# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Export Tray Models
A capture event freezes the editor state into one TrayItem holding a
rendered variant per device of the target ecosystem. Variants are never
re-derived from later edits.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from screenframe.models.device import DeviceType, Platform
from screenframe.models.editing import ExportMode


class RenderedVariant(BaseModel):
    """One lossless export raster plus its store filename."""
    model_config = ConfigDict(frozen=True)

    device_type: DeviceType
    filename: str
    width: int
    height: int
    png: bytes = Field(..., repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.png)

    def summary(self) -> dict:
        return {
            "device_type": self.device_type.value,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
            "size_bytes": self.size_bytes,
        }


class TrayItem(BaseModel):
    """All device variants produced by a single capture."""
    model_config = ConfigDict(frozen=True)

    item_id: str
    platform: Platform
    export_mode: ExportMode
    index: int = Field(..., ge=1)
    frame_color: str
    variants: tuple[RenderedVariant, ...]
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def primary_variant(self) -> RenderedVariant:
        return self.variants[0]

    def find_variant(self, filename: str) -> Optional[RenderedVariant]:
        for variant in self.variants:
            if variant.filename == filename:
                return variant
        return None

    def summary(self) -> dict:
        return {
            "item_id": self.item_id,
            "platform": self.platform.value,
            "export_mode": self.export_mode.value,
            "index": self.index,
            "frame_color": self.frame_color,
            "created_at": self.created_at.isoformat(),
            "variants": [v.summary() for v in self.variants],
        }


# ─── API Request/Response Schemas ────────────────────────────────────────────

class SwapRequest(BaseModel):
    """Request body for POST /sessions/{id}/tray/swap."""
    from_slot: int = Field(..., ge=0)
    to_slot: int = Field(..., ge=0)


class SessionResponse(BaseModel):
    """Response body for POST /sessions and tray revisions."""
    session_id: str
    master_width: int
    master_height: int
    view_class: str
    applied_crop: dict
    message: str = "Master image ready. PATCH /sessions/{id}/editor to adjust."
