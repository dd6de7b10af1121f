"""
FastAPI Application Entry Point

Integrates:
  - Compute embedding routes
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from api import compute_router, get_health_checker, initialize_health_checker
from infra import bootstrap_infrastructure, get_config
from tracing import get_tracer_config

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    initialize_health_checker()
    bootstrap = bootstrap_infrastructure()
    logger.info("=" * 60)
    logger.info("Compute gateway starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info(f"Compute: {bootstrap!r}")
    logger.info("=" * 60)

    yield

    # Shutdown
    stats = bootstrap.get_facade().get_stats()
    logger.info(
        f"Compute gateway shutting down "
        f"(requests={stats.requests_submitted}, fallbacks={stats.fallbacks_used})"
    )


# Create FastAPI app
app = FastAPI(
    title="Compute Gateway API",
    description="Embedding generation over the compute network with local fallback",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[Config.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(compute_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    checker = get_health_checker()
    status = checker.check_live(mode=get_config().compute_backend)
    return checker.to_dict(status)


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    checker = get_health_checker()
    bootstrap_error = None
    mode = get_config().compute_backend
    try:
        mode = bootstrap_infrastructure().config.compute_backend
    except Exception as e:
        logger.error(f"Compute bootstrap failed: {e}", exc_info=True)
        bootstrap_error = str(e)

    status = checker.check_ready(mode=mode, bootstrap_error=bootstrap_error)
    return JSONResponse(
        content=checker.to_dict(status),
        status_code=200 if status.ready else 503,
    )


@app.get("/health/trace")
async def trace_health():
    """Trace/observability configuration endpoint (read-only)."""
    return get_tracer_config()


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Compute Gateway API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "embedding": "POST /compute/embeddings",
            "batch_embeddings": "POST /compute/embeddings/batch",
            "similarity": "POST /compute/similarity",
            "availability": "GET /compute/availability",
            "stats": "GET /compute/stats",
            "network": "GET /compute/network",
            "compute_config": "GET /compute/config",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=Config.HOST,
        port=Config.PORT,
        log_level=Config.LOG_LEVEL.lower(),
    )
