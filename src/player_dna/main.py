"""Main entry point for the Player DNA registry API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from player_dna import __version__
from player_dna.api.v1 import (
    admin_router,
    auth_router,
    batches_router,
    decryption_router,
    events_router,
    submissions_router,
    system_router,
)
from player_dna.core.settings import settings
from player_dna.db.session import session_scope
from player_dna.services.errors import CooldownActiveError, RegistryError
from player_dna.services.oracle_relay import OracleRelay, get_oracle_relay, relay_enabled
from player_dna.services.registry import Registry, RegistryConfig

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Player DNA Registry API",
    description="Encrypted player skill registry with oracle-backed decryption",
    version=__version__,
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

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(batches_router, prefix="/api/v1")
app.include_router(submissions_router, prefix="/api/v1")
app.include_router(decryption_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    """Translate domain errors into JSON responses with their status code."""
    content: dict[str, object] = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, CooldownActiveError) and exc.retry_at is not None:
        content["retry_at"] = exc.retry_at
    return JSONResponse(status_code=exc.status_code, content=content)


def _bootstrap_registry() -> None:
    if not settings.registry_owner:
        logger.info("REGISTRY_OWNER not set; skipping registry bootstrap")
        return
    with session_scope() as db:
        Registry(db).initialize(RegistryConfig.from_settings())


@app.on_event("startup")
async def on_startup() -> None:
    _bootstrap_registry()
    if relay_enabled():
        relay = get_oracle_relay()
        await relay.start()
        app.state.oracle_relay = relay
    else:
        app.state.oracle_relay = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    relay: OracleRelay | None = getattr(app.state, "oracle_relay", None)
    if relay:
        await relay.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Player DNA Registry API",
        "version": __version__,
        "description": "Encrypted player skill registry with oracle-backed decryption",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("player_dna.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
