"""
FastAPI Application Entry Point

ChemStock authorization service with lifecycle management for the store
HTTP client.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from chemstock.api import API_VERSION
from chemstock.api.router import api_router
from chemstock.constants.constants import TRACE_HEADER_NAME, normalize_trace_id
from chemstock.core.config import settings
from chemstock.core.logging import set_trace_id, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Closes the pooled store client on shutdown.
    """
    setup_logging()
    logger.info(f"ChemStock authorization service starting up (env={settings.APP_ENV})...")

    yield

    logger.info("ChemStock authorization service shutting down...")
    from chemstock.tools import aclose_all_clients
    await aclose_all_clients()
    logger.info("Shutdown complete")


app = FastAPI(
    title="ChemStock Authorization Service",
    description="Role and permission resolution for chemical inventory management",
    version=API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_id_middleware(request: Request, call_next):
    """Bind x-request-id to the logging context and echo it back."""
    trace_id = normalize_trace_id(request.headers.get(TRACE_HEADER_NAME))
    set_trace_id(trace_id)
    response = await call_next(request)
    response.headers[TRACE_HEADER_NAME] = trace_id
    return response


app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Service info."""
    return {
        "service": "ChemStock Authorization",
        "status": "running",
        "version": API_VERSION
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "chemstock_authorization",
        "components": {
            "api": "ok",
            "resolver": "ok"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
