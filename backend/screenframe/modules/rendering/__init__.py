# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Rendering Module
Public API for the viewport compositor.
"""

from screenframe.modules.rendering.compositor import MasterSource, compose, render
from screenframe.modules.rendering.layout import ViewportLayout, compute_layout

__all__ = [
    "MasterSource",
    "compose",
    "render",
    "ViewportLayout",
    "compute_layout",
]
