# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — Error Taxonomy + Global Error Handler
Every failure the core can report is a discrete exception class defined
here. The handlers convert them into structured JSON error responses.
Registered on the FastAPI app in main.py.
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from screenframe.utils.logger import get_logger

log = get_logger(__name__)


class ImageValidationError(ValueError):
    """Raised when an uploaded image fails content-type or size validation."""


class DecodeFailure(ImageValidationError):
    """Source bytes cannot be decoded into a bitmap (LoadError)."""


class NoRenderContext(RuntimeError):
    """A drawing surface of the requested size could not be acquired."""


class EncodeFailure(RuntimeError):
    """The final raster could not be serialised to PNG (ProcessingFailed)."""


class CaptureFailed(RuntimeError):
    """At least one device render of a capture failed; nothing was committed."""


class SessionNotFoundError(KeyError):
    """Raised when a session_id does not exist in the store."""


class TrayItemNotFoundError(KeyError):
    """Raised when a tray item or variant file does not exist."""


class TrayFullError(RuntimeError):
    """Raised when a capture is requested but every tray slot is occupied."""


def _error_body(code: str, message: str, detail: str | None = None) -> dict:
    body = {"error": {"code": code, "message": message}}
    if detail:
        body["error"]["detail"] = detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(DecodeFailure)
    async def decode_failure_handler(
        req: Request, exc: DecodeFailure
    ) -> JSONResponse:
        log.warning("decode_failure", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="DECODE_FAILURE", message=str(exc)),
        )

    @app.exception_handler(ImageValidationError)
    async def image_validation_handler(
        req: Request, exc: ImageValidationError
    ) -> JSONResponse:
        log.warning("image_validation_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="IMAGE_VALIDATION_ERROR", message=str(exc)),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(
        req: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        log.warning("session_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="SESSION_NOT_FOUND",
                message=f"Session not found: {exc}",
            ),
        )

    @app.exception_handler(TrayItemNotFoundError)
    async def tray_item_not_found_handler(
        req: Request, exc: TrayItemNotFoundError
    ) -> JSONResponse:
        log.warning("tray_item_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="TRAY_ITEM_NOT_FOUND",
                message=f"Tray item not found: {exc}",
            ),
        )

    @app.exception_handler(TrayFullError)
    async def tray_full_handler(
        req: Request, exc: TrayFullError
    ) -> JSONResponse:
        log.warning("tray_full", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(code="TRAY_FULL", message=str(exc)),
        )

    @app.exception_handler(CaptureFailed)
    async def capture_failed_handler(
        req: Request, exc: CaptureFailed
    ) -> JSONResponse:
        log.error("capture_failed", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="CAPTURE_FAILED",
                message="Failed to generate the device variants for this capture.",
                detail=str(exc),
            ),
        )

    @app.exception_handler(EncodeFailure)
    async def encode_failure_handler(
        req: Request, exc: EncodeFailure
    ) -> JSONResponse:
        log.error("encode_failure", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(code="PROCESSING_FAILED", message=str(exc)),
        )

    @app.exception_handler(NoRenderContext)
    async def no_render_context_handler(
        req: Request, exc: NoRenderContext
    ) -> JSONResponse:
        log.error("no_render_context", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(code="NO_RENDER_CONTEXT", message=str(exc)),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
            ),
        )
