# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Upload Validator
Checks an uploaded screenshot before it becomes a master: content type,
size limit, and decodability.

Raises ImageValidationError (or its DecodeFailure subclass) so the API
error handler maps failures cleanly to HTTP 422.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from screenframe.api.middleware.error_handler import DecodeFailure, ImageValidationError
from screenframe.config import get_settings
from screenframe.utils.image_utils import bytes_to_bgra
from screenframe.utils.logger import get_logger

log = get_logger(__name__)


def decode_image(data: bytes, label: str = "image") -> np.ndarray:
    """
    Decode bytes into a BGRA uint8 array.

    Raises:
        DecodeFailure: bytes are empty or not a decodable raster
    """
    try:
        img = bytes_to_bgra(data)
    except ValueError as e:
        raise DecodeFailure(
            f"The {label} could not be decoded. "
            "Please supply a different file."
        ) from e
    return img


def validate_upload(
    data: bytes,
    content_type: Optional[str] = None,
    label: str = "screenshot",
) -> np.ndarray:
    """
    Validate raw upload bytes and return the decoded BGRA array.

    Checks performed (in order):
      1. Content type is image/* (when provided)
      2. Non-empty bytes
      3. File size within configured limit
      4. Decodability

    Raises:
        ImageValidationError: type / size failures
        DecodeFailure:        undecodable bytes
    """
    settings = get_settings()

    if content_type is not None and not content_type.startswith("image/"):
        raise ImageValidationError(
            f"Unsupported file type '{content_type}'. Please upload a valid image file."
        )

    if not data:
        raise ImageValidationError(f"The {label} file is empty.")

    size_mb = len(data) / (1024 * 1024)
    if len(data) > settings.upload_max_bytes:
        raise ImageValidationError(
            f"The {label} file is {size_mb:.1f} MB, which exceeds the "
            f"maximum allowed size of {settings.upload_max_mb} MB."
        )

    img = decode_image(data, label=label)
    log.debug(
        "upload_validated",
        label=label,
        shape=img.shape,
        size_mb=round(size_mb, 2),
    )
    return img
