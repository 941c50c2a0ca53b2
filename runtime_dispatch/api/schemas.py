"""Pydantic request/response models for the API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ── Requests ──────────────────────────────────────────────────────────────────


class ExecutionRequest(BaseModel):
    """Request to run a code snippet."""

    code: str = Field(
        ...,
        description="Source code to execute",
        examples=["console.log(1 + 1)", "print(42)"],
    )
    language: str = Field(
        ...,
        description="Language identifier (case-insensitive)",
        examples=["javascript", "python"],
        max_length=32,
    )


# ── Responses ─────────────────────────────────────────────────────────────────


class ExecutionResponse(BaseModel):
    """Normalized execution result."""

    runtime: str
    language: str
    output: str = ""
    error: Optional[str] = None
    exit_code: Optional[int] = None
    execution_time_ms: float


class LanguagesResponse(BaseModel):
    """Languages each backend can run."""

    local_sandbox: list[str]
    remote_judge: list[str]


class HealthResponse(BaseModel):
    """Service health."""

    status: str
    version: str
    judge_endpoint: str
