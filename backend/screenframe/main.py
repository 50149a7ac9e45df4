# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ScreenFrame — FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, routers,
and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from screenframe.api.middleware.error_handler import register_error_handlers
from screenframe.api.routes import devices, sessions, tray
from screenframe.config import get_settings
from screenframe.dependencies import get_session_store, init_session_store
from screenframe.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: configure logging, initialise the SessionStore.
    Shutdown: sessions are in-memory only and are simply dropped.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()

    log.info(
        "screenframe_startup",
        version=VERSION,
        upload_max_mb=settings.upload_max_mb,
        tray_slots=settings.tray_slots,
        border_tolerance=settings.border_tolerance,
    )

    init_session_store()

    log.info("screenframe_ready")
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    log.info("screenframe_shutdown", sessions=get_session_store().count())


def create_app() -> FastAPI:
    app = FastAPI(
        title="ScreenFrame",
        summary="Store-ready screenshots for every device from a single capture.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",   # Vite dev server
            "http://localhost:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(devices.router)
    app.include_router(sessions.router)
    app.include_router(tray.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @app.get("/health", tags=["health"], summary="Health check")
    async def health() -> dict:
        return {
            "status": "ok",
            "service": "screenframe",
            "version": VERSION,
            "sessions": get_session_store().count(),
        }

    return app


# Module-level app instance for uvicorn
app = create_app()
