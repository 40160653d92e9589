from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv

from persistence import AsyncStore, JsonFileSource, NullFlusher, SnapshotFlusher, Store
from settings import Settings, get_settings

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("jsml.requests")


def build_store(settings: Settings) -> Store:
    """
    Load the backing file. Raises StructuralLoadError on a malformed file.
    """
    source = JsonFileSource(settings.source_path)
    flusher = SnapshotFlusher(source) if settings.persist_to_disk else NullFlusher()
    store = Store.from_source(source, id_key=settings.id_key, flusher=flusher)
    logger.info("Serving %s (persist_to_disk=%s)", settings.source_path, settings.persist_to_disk)
    return store


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        yield
    finally:
        # drain pending writes before the process goes away
        app.state.store.store.close()


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    if settings is None:
        load_dotenv("local.env")
        settings = get_settings()

    from endpoints.collection_endpoints import router as collection_router
    from endpoints.panel_endpoints import router as panel_router

    if store is None:
        store = build_store(settings)

    # no generated docs routes: every top-level path belongs to a collection
    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.store = AsyncStore(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.debug_log_requests:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            request_logger.info("%d\t- %s\t-\t%.3f ms", response.status_code, request.url.path, elapsed_ms)
            return response

    # panel first so "/" never falls through to the collection routes
    app.include_router(panel_router)
    app.include_router(collection_router)

    return app
