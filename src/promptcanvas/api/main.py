"""Prompt Canvas - FastAPI Application.

This module is the single entry point for the web application.  It defines
the :func:`create_app` factory (uvicorn calls it at startup), all REST
API routes, and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :class:`~promptcanvas.core.config.PromptCanvasConfig`
  (``PROMPTCANVAS_*`` environment variables).
- **Image generation** goes through
  :class:`~promptcanvas.core.orchestrator.GenerationOrchestrator`, which calls
  the OpenAI / Azure OpenAI provider and stores results with
  :class:`~promptcanvas.core.storage.ImageStore`.
- **Gallery** listings re-scan the content directory on every call; there is
  no database.
- **History** is an in-memory :class:`~promptcanvas.core.history.HistoryLedger`
  owned by the app instance.
- **Stored images** are served by FastAPI's ``StaticFiles`` at ``/uploads``.

All collaborators are attached to ``app.state`` by :func:`create_app`, which
lets tests build an app around a temporary directory and a fake provider.

Endpoints
---------
========  ==============================  ==================================
Method    Path                            Purpose
========  ==============================  ==================================
GET       ``/api/health``                 Liveness check
POST      ``/api/generate-image``         Generate images for a prompt
GET       ``/api/history``                In-memory generation history
GET       ``/api/uploads``                Stored images merged with metadata
POST      ``/api/save-to-history``        Record a generation in history
GET       ``/api/test-image-connection``  One-off provider connectivity test
GET       ``/uploads/{filename}``         Stored image files
========  ==============================  ==================================

Errors are returned as ``{"error": "..."}`` with the status code of the
matching :class:`~promptcanvas.core.errors.PromptCanvasError`.

Usage
-----
CLI (installed entry point)::

    promptcanvas

Direct invocation::

    python -m promptcanvas.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from promptcanvas import __version__
from promptcanvas.api.gallery_store import list_gallery_items
from promptcanvas.api.models import GenerationRequest, SaveHistoryRequest
from promptcanvas.core.config import PromptCanvasConfig, config
from promptcanvas.core.errors import PromptCanvasError
from promptcanvas.core.history import HistoryLedger
from promptcanvas.core.orchestrator import GenerationOrchestrator
from promptcanvas.core.provider import ImageProvider, build_provider
from promptcanvas.core.storage import ImageStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Sentinel distinguishing "build the provider from config" from an explicit
# ``provider=None`` (no provider configured).
_FROM_CONFIG = object()


def _dump(model) -> dict:
    """Serialise a response model with camelCase keys, omitting unset optionals."""
    return model.model_dump(by_alias=True, mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log startup and release the provider's HTTP client on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    logger.info(f"Serving uploads from {app.state.config.uploads_dir}")

    yield  # Application runs here.

    if app.state.provider is not None:
        app.state.provider.close()
        logger.info("Image provider client closed on shutdown.")


# ---------------------------------------------------------------------------
# Error handlers.
# ---------------------------------------------------------------------------


async def handle_app_error(request: Request, exc: PromptCanvasError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed bodies with 400 and a message naming the field."""
    errors = exc.errors()
    first = errors[0] if errors else {}

    if first.get("type") == "json_invalid":
        message = "Invalid JSON body"
    else:
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field or 'body'}: {first.get('msg', 'invalid value')}"

    return JSONResponse(status_code=400, content={"error": message})


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Endpoint not found" if exc.status_code == 404 else exc.detail
    return JSONResponse(status_code=exc.status_code, content={"error": message})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


async def health() -> dict:
    """Return a static liveness message."""
    return {"status": "OK", "message": "Image Generation API is running"}


def generate_image(payload: GenerationRequest, request: Request) -> dict:
    """Generate images for a prompt.

    Declared as a plain ``def`` so that the blocking provider call runs in
    the threadpool instead of the event loop.

    Args:
        payload: ``{prompt, size?, quality?, n?}``.
        request: Incoming request (used to reach ``app.state``).

    Returns:
        Dictionary with ``success``, ``images``, ``originalPrompt``,
        ``source``, ``settings`` and, for placeholder responses, ``warning``.
    """
    orchestrator: GenerationOrchestrator = request.app.state.orchestrator
    logger.info(f"Generating {payload.n} image(s) for prompt: {payload.prompt!r}")
    return _dump(orchestrator.generate(payload))


async def get_history(request: Request) -> dict:
    """Return the in-memory generation history, newest first."""
    ledger: HistoryLedger = request.app.state.history
    return {"history": [_dump(entry) for entry in ledger.list()]}


def get_uploads(request: Request):
    """List every stored image merged with its metadata, newest first.

    Returns:
        Dictionary with ``images`` and ``count``, or a 500 response if the
        content directory cannot be read.
    """
    settings: PromptCanvasConfig = request.app.state.config

    try:
        images = list_gallery_items(settings.uploads_dir, settings.public_base_url)
    except OSError as e:
        logger.error(f"Error reading uploads folder: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to read uploads folder", "message": str(e)},
        )

    return {"images": [_dump(image) for image in images], "count": len(images)}


async def save_to_history(payload: SaveHistoryRequest, request: Request) -> dict:
    """Record a generation in the history ledger.

    Returns:
        Dictionary with ``success`` and the created ``item``.
    """
    ledger: HistoryLedger = request.app.state.history
    entry = ledger.record(
        prompt=payload.prompt,
        image_url=payload.image_url,
        settings=payload.settings,
        duration=payload.duration,
    )
    return {"success": True, "item": _dump(entry)}


def check_image_connection(request: Request):
    """Run one small generation against the provider.

    Returns:
        ``{status: "Connected", message, provider, testImage}``, or a 500
        response with ``{status: "Error", message, error}``.
    """
    orchestrator: GenerationOrchestrator = request.app.state.orchestrator

    try:
        result = orchestrator.check_connection()
    except PromptCanvasError as e:
        logger.error(f"Image provider connection test failed: {e.message}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "Error",
                "message": "Image provider connection failed",
                "error": e.message,
            },
        )

    return {
        "status": "Connected",
        "message": "Image generation successful",
        **result,
    }


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    settings: PromptCanvasConfig | None = None,
    provider: ImageProvider | None | object = _FROM_CONFIG,
) -> FastAPI:
    """Build a FastAPI application wired to a content directory and provider.

    Args:
        settings: Configuration; defaults to the global ``config``.
        provider: Image provider.  Omit to build it from *settings*; pass
            ``None`` for an app without a configured provider.

    Returns:
        The configured :class:`FastAPI` instance.
    """
    settings = settings or config
    if provider is _FROM_CONFIG:
        provider = build_provider(settings)

    app = FastAPI(
        title="Prompt Canvas",
        description="Prompt-to-image API with an on-disk gallery and generation history.",
        version=__version__,
        lifespan=lifespan,
    )

    store = ImageStore(settings.uploads_dir, settings.public_base_url)
    app.state.config = settings
    app.state.provider = provider
    app.state.history = HistoryLedger(settings.history_capacity)
    app.state.orchestrator = GenerationOrchestrator(provider, store, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PromptCanvasError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_api_route("/api/health", health, methods=["GET"])
    app.add_api_route("/api/generate-image", generate_image, methods=["POST"])
    app.add_api_route("/api/history", get_history, methods=["GET"])
    app.add_api_route("/api/uploads", get_uploads, methods=["GET"])
    app.add_api_route("/api/save-to-history", save_to_history, methods=["POST"])
    app.add_api_route("/api/test-image-connection", check_image_connection, methods=["GET"])

    # Stored images are served straight from the content directory.
    app.mount("/uploads", StaticFiles(directory=str(settings.uploads_dir)), name="uploads")

    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~promptcanvas.core.config.config` (which
    loads from ``PROMPTCANVAS_SERVER_HOST`` and ``PROMPTCANVAS_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:3001``.

    This function is registered as the ``promptcanvas`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(level=config.log_level.upper(), format=LOG_FORMAT)

    uvicorn.run(
        "promptcanvas.api.main:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
