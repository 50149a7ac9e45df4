# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Application Configuration
All settings are loaded from environment variables with store-export
defaults. Override via backend/.env or environment.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Uploads ─────────────────────────────────────────────────────────────
    upload_max_mb: int = 8

    # ─── Border Detection ────────────────────────────────────────────────────
    # Per-channel difference (0–255) below which a pixel matches the edge colour
    border_tolerance: int = 5

    # ─── Editor Defaults ─────────────────────────────────────────────────────
    default_device: str = "IPHONE"
    default_frame_color: str = "#1a1a1a"

    # ─── Export Tray ─────────────────────────────────────────────────────────
    tray_slots: int = 8
    max_sessions: int = 64

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
