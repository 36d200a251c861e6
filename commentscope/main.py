"""
CommentScope — Main FastAPI Application

YouTube comment classification, prefix search and analysis service.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from commentscope.core.config import get_settings
from commentscope.core.exceptions import CommentScopeError
from commentscope.models.models import CommentCategory, SortKey

settings = get_settings()

# ── Logging ──────────────────────────────────────────────────────────────

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level)
    ),
)

logger = structlog.get_logger()


# ── Lifespan ─────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    logger.info("Starting CommentScope", version=settings.app_version)

    if not settings.youtube_api_key:
        logger.warning("YouTube API key is not configured; /analyze will fail until it is set")

    from commentscope.ml.nlp.enrichment_service import enrichment_service
    logger.info(
        "CommentScope ready",
        enrichment_default=settings.enrichment_enabled,
        enrichment_available=enrichment_service.available,
        enrichment_model=settings.enrichment_model,
    )

    yield

    logger.info("Shutting down CommentScope")


# ── App ──────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    description="YouTube comment classification, prefix search and analysis",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


# ── Errors ───────────────────────────────────────────────────────────────

@app.exception_handler(CommentScopeError)
async def commentscope_error_handler(request: Request, exc: CommentScopeError):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        status=exc.status_code,
        error=type(exc).__name__,
        message=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


# ── Routes ───────────────────────────────────────────────────────────────

from commentscope.api.routes import analyze, search, videos

app.include_router(analyze.router, prefix=settings.api_prefix)
app.include_router(search.router, prefix=settings.api_prefix)
app.include_router(videos.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "description": "YouTube comment classification, prefix search and analysis",
        "version": settings.app_version,
        "categories": [c.value for c in CommentCategory],
        "sort_keys": [k.value for k in SortKey],
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "version": settings.app_version}
