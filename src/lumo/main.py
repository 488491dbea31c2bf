# src/lumo/main.py
"""ASGI application: REST routers, error translation and the Socket.IO mount."""

from __future__ import annotations

import logging

import socketio
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from lumo.api.v1 import (
    collaboration_router,
    comments_router,
    notifications_router,
    posts_router,
    users_router,
)
from lumo.core.errors import LumoError, StorageError
from lumo.core.settings import settings
from lumo.db.session import create_tables
from lumo.realtime.server import sio
from lumo.utils.tasks import drain_background_tasks

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lumo API",
    description="Collaborative blogging backend",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(GZipMiddleware)

app.include_router(posts_router, prefix="/api/v1")
app.include_router(collaboration_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.exception_handler(LumoError)
async def handle_domain_error(request: Request, exc: LumoError) -> JSONResponse:
    """Translate service-layer failures into JSON error responses."""
    if isinstance(exc, StorageError) or exc.status_code >= 500:
        logger.exception(
            "Unhandled storage failure on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Something went wrong. Please try again."},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
async def on_startup() -> None:
    create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await drain_background_tasks()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Service name, version and docs location."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Collaborative blogging backend",
        "docs": "/docs",
        "redoc": "/redoc",
        "socket": f"/{settings.socketio_path}",
    }


# Socket.IO requests are answered here; everything else falls through to FastAPI.
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app, socketio_path=settings.socketio_path)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lumo.main:asgi_app", host="0.0.0.0", port=8000, reload=settings.debug)
