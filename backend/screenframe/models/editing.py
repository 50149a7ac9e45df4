# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Editing Value Models
Crop rectangle, tonal adjustments and the fit/export policies that the
compositor consumes. CropArea and ImageAdjustments are frozen values
passed into every render by value; EditorState is the only mutable slice
and lives on the editing session, never on a captured tray item.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from screenframe.models.device import DeviceType

# Float slack for crops computed from pixel ratios (e.g. 33.333… + 66.666…)
_CROP_EPSILON = 1e-6


class FitMode(str, Enum):
    FIT = "FIT"            # letterbox
    STRETCH = "STRETCH"    # force to target rect
    AUTOFIT = "AUTOFIT"    # cover


class ExportMode(str, Enum):
    RECTANGLE = "RECTANGLE"
    FRAME = "FRAME"


class CropArea(BaseModel):
    """
    Sub-rectangle of the current image in percent of its dimensions.
    Resolution-independent: the same CropArea re-applies to any buffer
    of the same logical image.
    """
    model_config = ConfigDict(frozen=True)

    x: float = Field(0.0, ge=0.0, le=100.0)
    y: float = Field(0.0, ge=0.0, le=100.0)
    width: float = Field(100.0, gt=0.0, le=100.0)
    height: float = Field(100.0, gt=0.0, le=100.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "CropArea":
        if self.x + self.width > 100.0 + _CROP_EPSILON:
            raise ValueError(
                f"Crop exceeds image width: x={self.x} + width={self.width} > 100"
            )
        if self.y + self.height > 100.0 + _CROP_EPSILON:
            raise ValueError(
                f"Crop exceeds image height: y={self.y} + height={self.height} > 100"
            )
        return self

    @classmethod
    def full(cls) -> "CropArea":
        """Identity crop covering the whole image."""
        return cls(x=0.0, y=0.0, width=100.0, height=100.0)

    @property
    def is_full(self) -> bool:
        return (self.x, self.y, self.width, self.height) == (0.0, 0.0, 100.0, 100.0)

    def to_pixels(self, img_w: int, img_h: int) -> tuple[float, float, float, float]:
        """Resolve to an absolute (sx, sy, sw, sh) rectangle, unrounded."""
        return (
            self.x / 100.0 * img_w,
            self.y / 100.0 * img_h,
            self.width / 100.0 * img_w,
            self.height / 100.0 * img_h,
        )


class ImageAdjustments(BaseModel):
    """
    Global tonal filters. brightness/contrast/saturation are percentages
    centred at 100 (no change); sharpness 0 skips the sharpening pass.
    """
    model_config = ConfigDict(frozen=True)

    brightness: float = Field(100.0, ge=0.0)
    contrast: float = Field(100.0, ge=0.0)
    saturation: float = Field(100.0, ge=0.0)
    sharpness: float = Field(0.0, ge=0.0, le=100.0)

    @property
    def is_tonal_neutral(self) -> bool:
        return self.brightness == 100 and self.contrast == 100 and self.saturation == 100

    @property
    def is_neutral(self) -> bool:
        return self.is_tonal_neutral and self.sharpness == 0


NEUTRAL_ADJUSTMENTS = ImageAdjustments()


class EditorState(BaseModel):
    """
    The live-editing slice of a session. Mutated by PATCH requests;
    captured tray items copy the values they need and never point back here.
    """
    fit_mode: FitMode = FitMode.FIT
    export_mode: ExportMode = ExportMode.RECTANGLE
    selected_device: DeviceType = DeviceType.IPHONE
    frame_color: str = Field("#1a1a1a", pattern=r"^#[0-9a-fA-F]{6}$")
    crop_area: CropArea = Field(default_factory=CropArea.full)
    adjustments: ImageAdjustments = Field(default_factory=ImageAdjustments)

    def reset_for_new_master(self) -> None:
        """Crop and tonal state only make sense relative to the old master."""
        self.crop_area = CropArea.full()
        self.adjustments = ImageAdjustments()


class EditorUpdate(BaseModel):
    """Request body for PATCH /sessions/{id}/editor. Omitted fields are kept."""
    fit_mode: FitMode | None = None
    export_mode: ExportMode | None = None
    selected_device: DeviceType | None = None
    frame_color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    crop_area: CropArea | None = None
    adjustments: ImageAdjustments | None = None
