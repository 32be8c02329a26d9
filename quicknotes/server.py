"""Reference FastAPI backend for the remote note store.

Endpoints (mounted under /api):
  GET    /api/notes       — List all notes
  POST   /api/notes       — Create a note
  PUT    /api/notes/{id}  — Update a note
  DELETE /api/notes/{id}  — Delete a note
  GET    /health          — Server health and note count
  GET    /metrics         — Prometheus metrics

Notes are persisted through a LocalNoteStore, so the remote variant of
the client can be pointed at this server with QUICKNOTES_USE_REMOTE_STORE.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from quicknotes.config import settings
from quicknotes.errors import InvalidRecord, NoteNotFound, StoreUnavailable
from quicknotes.metrics import HTTP_DURATION, HTTP_REQUESTS
from quicknotes.models import Note, NoteChanges, NoteDraft
from quicknotes.storage import LocalNoteStore

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

# Endpoints excluded from HTTP metrics to avoid cardinality explosion
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request count and duration for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in _METRICS_EXCLUDE:
            return await call_next(request)

        # Collapse note ids so every note doesn't get its own label
        endpoint = path
        if path.startswith(f"{API_PREFIX}/notes/"):
            endpoint = f"{API_PREFIX}/notes/{{id}}"

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        HTTP_REQUESTS.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(endpoint=endpoint).observe(elapsed)
        return response


def _store(request: Request) -> LocalNoteStore:
    return request.app.state.store


# --- Notes endpoints ---

router = APIRouter(prefix=API_PREFIX)


@router.get("/notes", response_model=list[Note])
async def list_notes(request: Request) -> list[Note]:
    """Return every stored note."""
    return await _store(request).list()


@router.post("/notes", response_model=Note, status_code=201)
async def create_note(payload: NoteDraft, request: Request) -> Note:
    """Create a note with a store-assigned id and timestamps."""
    return await _store(request).create(payload)


@router.put("/notes/{note_id}", response_model=Note)
async def update_note(note_id: str, payload: NoteChanges, request: Request) -> Note:
    """Merge title/content into an existing note."""
    return await _store(request).update(note_id, payload)


@router.delete("/notes/{note_id}", response_model=Note)
async def delete_note(note_id: str, request: Request) -> Note:
    """Delete a note and echo the removed record."""
    return await _store(request).delete(note_id)


# --- Error mapping ---


async def _not_found(request: Request, exc: NoteNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _invalid_record(request: Request, exc: InvalidRecord) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("Store unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# --- Application factory ---


def create_app(store: LocalNoteStore) -> FastAPI:
    """Build the API around the given store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("QuickNotes server starting — storage at %s", store.path)
        yield
        await store.aclose()
        logger.info("QuickNotes server shut down.")

    app = FastAPI(title="QuickNotes", version="1.0.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NoteNotFound, _not_found)
    app.add_exception_handler(InvalidRecord, _invalid_record)
    app.add_exception_handler(StoreUnavailable, _unavailable)

    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Report whether the store is readable and how many notes it holds."""
        try:
            total = len(await store.list())
        except StoreUnavailable as exc:
            return {"status": "degraded", "error": str(exc)}
        return {
            "status": "healthy",
            "total_notes": total,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app(LocalNoteStore(settings.storage_path, slot=settings.storage_slot))


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
