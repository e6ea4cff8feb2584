"""
HTTP service for the collection.

Run:
  uvicorn nondilutive.service.app:app

Env: see nondilutive.common.config (COLLECTION_*, GENERATION_*), plus
SERVICE_NAME / ENV / LOG_LEVEL for logging.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nondilutive.catalog.loader import apply_catalog, load_catalog
from nondilutive.collection.contract import NonDilutiveCollection
from nondilutive.collection.errors import CollectionError, ErrorCode, ErrorKind
from nondilutive.common.config import load_collection_settings
from nondilutive.common.logging import init_structured_logging, install_fastapi_request_id_middleware, log_event

from .routers import collection as collection_routes
from .routers import generations as generation_routes
from .routers import tokens as token_routes

SERVICE_NAME = "nondilutive-collection"

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[str, int] = {
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PRECONDITION: 409,
    ErrorKind.PAYMENT: 409,
    ErrorKind.INVALID_ARGUMENT: 422,
    ErrorKind.REENTRANCY: 409,
}

_STATUS_BY_CODE: dict[str, int] = {
    ErrorCode.INSUFFICIENT_PAYMENT: 402,
}


def status_for_error(e: CollectionError) -> int:
    return _STATUS_BY_CODE.get(e.code) or _STATUS_BY_KIND.get(e.kind, 400)


def build_collection() -> NonDilutiveCollection:
    """Construct the collection from env settings and preload the generation catalog."""
    settings = load_collection_settings()
    collection = NonDilutiveCollection(settings)
    specs = load_catalog(settings.catalog_dir) if settings.catalog_dir is not None else []
    if specs:
        apply_catalog(collection, specs, caller=settings.admin)
    log_event(
        logger,
        "collection.ready",
        collection_name=collection.name,
        generation_ids=[g.generation_id for g in collection.generations()],
        mint_open=collection.mint_open,
    )
    return collection


def create_app(collection: NonDilutiveCollection | None = None) -> FastAPI:
    app = FastAPI(title="Non-Dilutive Collection")
    install_fastapi_request_id_middleware(app, service=SERVICE_NAME)
    app.state.collection = collection if collection is not None else build_collection()

    @app.exception_handler(CollectionError)
    async def _collection_error(request: Request, exc: CollectionError) -> JSONResponse:
        return JSONResponse(status_code=status_for_error(exc), content=exc.to_dict())

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "service": SERVICE_NAME}

    app.include_router(collection_routes.router)
    app.include_router(generation_routes.router)
    app.include_router(token_routes.router)
    return app


def _main_app() -> FastAPI:
    init_structured_logging(service=os.getenv("SERVICE_NAME") or SERVICE_NAME)
    return create_app()


app = _main_app()
