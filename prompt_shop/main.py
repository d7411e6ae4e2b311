"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from prompt_shop.api.router import api_router
from prompt_shop.config import get_settings
from prompt_shop.db.store import get_record_store
from prompt_shop.utils.logging import bind_request, setup_logging

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("promptshop.starting", port=settings.port, storage=settings.storage_backend)

    get_record_store()
    if not settings.ai_api_key:
        logger.info("promptshop.ai_disabled", reason="ai_api_key not configured")

    yield

    logger.info("promptshop.shutdown")


app = FastAPI(
    title="PromptShop",
    description="Structured prompt composition for text-to-image generation",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    bind_request(request.method, request.url.path)
    response = await call_next(request)
    if response.status_code >= 500:
        logger.error("request.failed", status=response.status_code)
    return response


app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Service info endpoint."""
    return {"service": "promptshop", "version": VERSION}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "promptshop", "version": VERSION}


def run() -> None:
    """Serve the API with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("prompt_shop.main:app", host="0.0.0.0", port=get_settings().port)
