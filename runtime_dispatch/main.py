"""FastAPI application entry point."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runtime_dispatch.api.deps import get_dispatcher
from runtime_dispatch.api.routes import router
from runtime_dispatch.config.settings import settings
from runtime_dispatch.utils.logging import get_logger, setup_logging

# Initialize logging
setup_logging(settings.LOG_LEVEL, json_output=settings.ENV != "dev")

logger = get_logger("startup")

# Create app
app = FastAPI(
    title="Runtime Dispatch",
    description="Dual-mode code execution: local sandbox or remote judge",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS — permissive for dev, restrict in prod
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(router)


@app.on_event("startup")
async def startup() -> None:
    """Application startup tasks."""
    logger.info(
        "Runtime Dispatch starting",
        env=settings.ENV,
        judge_endpoint=settings.JUDGE0_API_URL,
        judge_key_configured=bool(settings.JUDGE0_API_KEY),
    )


@app.on_event("shutdown")
async def shutdown() -> None:
    """Tear down the shared sandbox session."""
    await get_dispatcher().close()
