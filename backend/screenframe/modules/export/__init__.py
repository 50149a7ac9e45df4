# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Export Module
Public API for store filename conventions.
"""

from screenframe.modules.export.naming import MODE_LABELS, export_filename

__all__ = ["MODE_LABELS", "export_filename"]
