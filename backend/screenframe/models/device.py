# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Device Spec Registry
Static table of store export targets. Each DeviceSpec fixes the exact
output pixel dimensions, the ecosystem it belongs to, and whether it is
classed as a tablet. Pure data: the compositor reads these values and
never mutates them. Adding a device means adding a row here.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    APPLE = "APPLE"
    ANDROID = "ANDROID"


class DeviceType(str, Enum):
    PHONE = "PHONE"
    TABLET_7 = "TABLET_7"
    TABLET_10 = "TABLET_10"
    CHROMEBOOK = "CHROMEBOOK"
    IPHONE = "IPHONE"
    IPHONE_61 = "IPHONE_61"
    IPAD = "IPAD"


class DeviceSpec(BaseModel):
    """One export target. Immutable once defined."""
    model_config = ConfigDict(frozen=True)

    id: DeviceType
    name: str
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    platform: Platform
    aspect_ratio: str
    is_tablet: bool = False
    # Filename segments: {platform}_{device_label}_{size_label}_{mode}_{NN}.png
    device_label: str
    size_label: str = ""

    @property
    def is_portrait(self) -> bool:
        return self.width < self.height

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) in pixels."""
        return self.width, self.height


class FrameColor(BaseModel):
    """Named chassis swatch offered for FRAME exports."""
    model_config = ConfigDict(frozen=True)

    name: str
    hex: str = Field(..., pattern=r"^#[0-9a-fA-F]{6}$")


DEVICE_SPECS: dict[DeviceType, DeviceSpec] = {
    DeviceType.PHONE: DeviceSpec(
        id=DeviceType.PHONE,
        name="Android Phone (9:16)",
        width=1080,
        height=1920,
        platform=Platform.ANDROID,
        aspect_ratio="9:16",
        device_label="phone",
    ),
    DeviceType.TABLET_7: DeviceSpec(
        id=DeviceType.TABLET_7,
        name='7" Android Tablet',
        width=1200,
        height=1920,
        platform=Platform.ANDROID,
        aspect_ratio="10:16",
        is_tablet=True,
        device_label="tablet",
        size_label="7in",
    ),
    DeviceType.TABLET_10: DeviceSpec(
        id=DeviceType.TABLET_10,
        name='10" Android Tablet',
        width=1600,
        height=2560,
        platform=Platform.ANDROID,
        aspect_ratio="10:16",
        is_tablet=True,
        device_label="tablet",
        size_label="10in",
    ),
    DeviceType.CHROMEBOOK: DeviceSpec(
        id=DeviceType.CHROMEBOOK,
        name="Chromebook (16:9)",
        width=1920,
        height=1080,
        platform=Platform.ANDROID,
        aspect_ratio="16:9",
        device_label="chromebook",
    ),
    DeviceType.IPHONE: DeviceSpec(
        id=DeviceType.IPHONE,
        name='iPhone 6.7" Display',
        width=1290,
        height=2796,
        platform=Platform.APPLE,
        aspect_ratio="9:19.5",
        device_label="phone",
        size_label="6.7",
    ),
    DeviceType.IPHONE_61: DeviceSpec(
        id=DeviceType.IPHONE_61,
        name='iPhone 6.1" Standard',
        width=1179,
        height=2556,
        platform=Platform.APPLE,
        aspect_ratio="9:19.5",
        device_label="phone",
        size_label="6.1",
    ),
    DeviceType.IPAD: DeviceSpec(
        id=DeviceType.IPAD,
        name='iPad Pro 12.9"',
        width=2048,
        height=2732,
        platform=Platform.APPLE,
        aspect_ratio="3:4",
        is_tablet=True,
        device_label="tablet",
        size_label="12.9",
    ),
}


FRAME_COLORS: dict[Platform, tuple[FrameColor, ...]] = {
    Platform.APPLE: (
        FrameColor(name="Black Titanium", hex="#1a1a1a"),
        FrameColor(name="Natural Titanium", hex="#beb8af"),
        FrameColor(name="White Titanium", hex="#f2f1ed"),
        FrameColor(name="Desert Titanium", hex="#c8b19a"),
    ),
    Platform.ANDROID: (
        FrameColor(name="Phantom Black", hex="#1a1a1a"),
        FrameColor(name="Titanium Gray", hex="#7a7a7a"),
        FrameColor(name="Titanium Violet", hex="#5b546a"),
        FrameColor(name="Titanium Yellow", hex="#f2e8cf"),
    ),
}


def get_spec(device: DeviceType | str) -> DeviceSpec:
    """Look up a spec by DeviceType (or its string value). Raises ValueError."""
    return DEVICE_SPECS[DeviceType(device)]


def specs_for_platform(platform: Platform) -> list[DeviceSpec]:
    """All specs belonging to one ecosystem, in registry order."""
    return [s for s in DEVICE_SPECS.values() if s.platform == platform]
