"""
FastAPI application entry point for the site backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from welfare_site.config import Settings, get_settings
from welfare_site.dependencies import build_store
from welfare_site.errors import (
    ContentConflictError,
    ContentNotFoundError,
    ContentValidationError,
    FeatureDisabledError,
)
from welfare_site.routes import router
from welfare_site.store import DocumentStore, StoreError

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _message(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()) if part != 'body')}: "
            f"{error.get('msg')}"
            for error in errors
        )
        return _message(400, f"Invalid data format provided. {detail}".strip())

    @app.exception_handler(ContentValidationError)
    @app.exception_handler(ContentConflictError)
    @app.exception_handler(ContentNotFoundError)
    @app.exception_handler(FeatureDisabledError)
    async def content_error(request: Request, exc: Exception):
        return _message(exc.status_code, str(exc))

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.exception("Store error on %s %s", request.method, request.url.path)
        return _message(500, "Failed to access the content database.")


def create_app(
    store: Optional[DocumentStore] = None, settings: Optional[Settings] = None
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.store.close()
        logger.info("Document store closed")

    app = FastAPI(title="Heart2Heart Welfare Site API", version="0.1.0", lifespan=lifespan)
    # One store per process, reused by every request.
    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
