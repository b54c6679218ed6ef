"""
FastAPI gateway for txvault.

This is the HTTP surface around the envelope core:
- Binds to 127.0.0.1 by default
- Seals payloads on POST /tx/encrypt and stores the record
- Returns stored records and opens them on request
- Applies security headers, rate limiting, and request size limits

The master key is loaded once here and kept in app state. It is never
written to a response or a log line.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from txvault.constants import PROJECT_DISPLAY_NAME, PROJECT_VERSION
from txvault.crypto.errors import EnvelopeError
from txvault.crypto.keys import MasterKey
from txvault.gateway.config import TxVaultConfig, load_config
from txvault.gateway.middleware import (
    RateLimitMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from txvault.storage.store import TxStore, make_store
from txvault.utils.logging import get_logger, setup_logging

logger = get_logger("gateway")


def create_app(
    config: TxVaultConfig | None = None,
    store: TxStore | None = None,
    master_key: MasterKey | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Anything not passed in is built from configuration. A missing or
    malformed master key raises here, before the app can serve.
    """
    config = config or load_config()

    setup_logging(
        level=config.logging.level,
        json_format=config.logging.format == "json",
    )

    if master_key is None:
        master_key = config.load_master_key()
    if store is None:
        store = make_store(config.storage)
    store.open()

    app = FastAPI(
        title=f"{PROJECT_DISPLAY_NAME} API",
        version=PROJECT_VERSION,
        description="Envelope encryption for transaction payloads",
        docs_url="/docs" if os.getenv("TXVAULT_DEV") else None,
        redoc_url=None,
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.master_key = master_key

    _add_middleware(app, config)
    _add_exception_handlers(app)
    _register_routes(app)

    logger.info(
        "gateway_created",
        mk_version=master_key.version,
        storage=config.storage.backend,
        version=PROJECT_VERSION,
    )
    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close the record store when the server stops."""
    yield
    app.state.store.close()
    logger.info("gateway_stopped")


def _add_middleware(app: FastAPI, config: TxVaultConfig) -> None:
    """Add middleware layers (last added runs first)."""
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_size_bytes=config.gateway.max_body_bytes,
    )

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.gateway.rate_limit_per_minute,
        window=60,
    )

    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.gateway.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )


def _add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(EnvelopeError)
    async def envelope_error(request: Request, exc: EnvelopeError) -> JSONResponse:
        # Message names the field at most, never key or payload bytes
        logger.warning("envelope_error", code=exc.code, field=exc.field, path=request.url.path)
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def invalid_input(request: Request, exc: RequestValidationError) -> JSONResponse:
        issues = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        return JSONResponse(
            {"error": "invalid_input", "issues": jsonable_encoder(issues)},
            status_code=400,
        )


def _register_routes(app: FastAPI) -> None:
    """Register all API route handlers."""
    from txvault.gateway.health import health_router
    from txvault.gateway.router import tx_router

    app.include_router(health_router)
    app.include_router(tx_router)
