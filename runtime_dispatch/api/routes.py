"""FastAPI route handlers — code execution."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from runtime_dispatch.api.deps import get_dispatcher
from runtime_dispatch.api.schemas import (
    ExecutionRequest,
    ExecutionResponse,
    HealthResponse,
    LanguagesResponse,
)
from runtime_dispatch.config.settings import settings
from runtime_dispatch.runtime.base import RuntimeType
from runtime_dispatch.runtime.dispatcher import ExecutionDispatcher
from runtime_dispatch.runtime.router import supported_languages
from runtime_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["executions"])


# ── Health ────────────────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service health check."""
    return HealthResponse(
        status="healthy",
        version="0.1.0",
        judge_endpoint=settings.JUDGE0_API_URL,
    )


@router.get("/languages", response_model=LanguagesResponse)
async def list_languages() -> LanguagesResponse:
    """List languages per backend. Unlisted languages are still routed to the judge."""
    languages = supported_languages()
    return LanguagesResponse(
        local_sandbox=languages[RuntimeType.LOCAL_SANDBOX.value],
        remote_judge=languages[RuntimeType.REMOTE_JUDGE.value],
    )


# ── Executions ────────────────────────────────────────────────────────────────


@router.post("/executions", response_model=ExecutionResponse)
async def create_execution(
    request: ExecutionRequest,
    dispatcher: ExecutionDispatcher = Depends(get_dispatcher),
) -> ExecutionResponse:
    """Run a snippet and wait for its result.

    Failed executions still return 200; check ``error`` in the body.
    """
    logger.info("Execution requested", language=request.language, code_chars=len(request.code))

    env, result = await dispatcher.execute(request.code, request.language)

    return ExecutionResponse(
        runtime=env.type.value,
        language=env.language,
        output=result.output,
        error=result.error,
        exit_code=result.exit_code,
        execution_time_ms=result.execution_time_ms,
    )
