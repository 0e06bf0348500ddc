"""
FastAPI application entry point for the Scalewise API.

This module serves as the central orchestration file for the Python service layer.
It configures logging and CORS, registers API routers, and starts the ASGI server.

The database is optional: without DATABASE_URL the key-value store falls back
to process memory and every aggregation endpoint works unchanged.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scalewise import __version__
from scalewise.api import api_router
from scalewise.core.database import init_db, close_db
from scalewise.core.exceptions import StoreUnavailableError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize database connection pool (when configured)
    On shutdown:
        - Close database connection pool
    """
    # Startup
    logger.info("Scalewise API starting")
    try:
        await init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # Aggregation endpoints do not need the database

    yield

    # Shutdown
    logger.info("Scalewise API shutting down")
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="Scalewise API",
    version=__version__,
    description=(
        "Aggregation and projection engine for the Scalewise dashboard. "
        "Provides offer and media buyer performance, scaling recommendations, "
        "cash projections and operator notes."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    """Report key-value store outages as 503 instead of a generic 500."""
    logger.error(f"Key-value store unavailable on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Key-value store unavailable"})


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Scalewise API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scalewise.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
