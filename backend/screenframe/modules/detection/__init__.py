# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Detection Module
Public API for uniform-border detection.
"""

from screenframe.modules.detection.border_detector import detect_borders

__all__ = ["detect_borders"]
