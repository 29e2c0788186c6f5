# src/chatline/main.py
"""Main entry point for the Chatline application."""

from __future__ import annotations

import logging

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from chatline.api.errors import register_exception_handlers
from chatline.api.v1 import calls_router, chat_router, friends_router, users_router
from chatline.core.settings import settings
from chatline.db.session import create_tables
from chatline.realtime.gateway import sio

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Chat and calling backend with a realtime presence and signaling relay",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

register_exception_handlers(app)

# Include API routers
app.include_router(users_router, prefix="/api")
app.include_router(friends_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(calls_router, prefix="/api")


@app.on_event("startup")
async def on_startup() -> None:
    create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Chat and calling backend with a realtime presence and signaling relay",
        "docs": "/docs",
        "socketio_path": f"/{settings.socketio_path}",
    }


# Socket.IO traffic under SOCKETIO_PATH, everything else to FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app, socketio_path=settings.socketio_path)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chatline.main:asgi_app", host="0.0.0.0", port=8000, reload=settings.debug)
