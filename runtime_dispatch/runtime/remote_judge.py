"""Remote judge backend — submit-then-poll client for a Judge0-compatible service."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable
from urllib.parse import urlparse

import httpx

from runtime_dispatch.runtime.base import ExecutionResult, RuntimeType
from runtime_dispatch.runtime.languages import JUDGE0_LANGUAGE_IDS
from runtime_dispatch.runtime.router import normalize_language
from runtime_dispatch.utils.errors import (
    PollTimeoutError,
    SubmissionError,
    UnsupportedLanguageError,
)
from runtime_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

# Judge0 status ids: 1 = In Queue, 2 = Processing, 3 = Accepted, >3 = failure categories
STATUS_IN_PROGRESS_MAX = 2
STATUS_ACCEPTED = 3

_RESULT_FIELDS = "stdout,stderr,compile_output,message,status,exit_code"


class RemoteJudgeBackend:
    """Stateless Judge0 client. Each ``execute_code`` call is a self-contained
    submit-then-poll cycle, so one instance is safe for concurrent use.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        api_host: str | None = None,
        poll_interval_sec: float = 1.0,
        max_poll_attempts: int = 30,
        request_timeout_sec: float = 10.0,
        default_language_id: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._api_host = api_host or urlparse(self._endpoint).hostname or ""
        self._poll_interval_sec = poll_interval_sec
        self._max_poll_attempts = max_poll_attempts
        self._request_timeout_sec = request_timeout_sec
        self._default_language_id = default_language_id
        self._transport = transport
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def max_poll_attempts(self) -> int:
        return self._max_poll_attempts

    def language_id(self, language: str) -> int:
        """Map a language to its judge id.

        Unknown languages use the configured default id when one is set;
        otherwise they are rejected rather than silently run as another language.
        """
        normalized = normalize_language(language)
        language_id = JUDGE0_LANGUAGE_IDS.get(normalized)
        if language_id is not None:
            return language_id
        if self._default_language_id is not None:
            logger.info(
                "Unknown judge language, using default id",
                language=normalized,
                language_id=self._default_language_id,
            )
            return self._default_language_id
        raise UnsupportedLanguageError(normalized, RuntimeType.REMOTE_JUDGE.value)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-RapidAPI-Key": self._api_key,
            "X-RapidAPI-Host": self._api_host,
        }

    async def execute_code(self, code: str, language: str) -> ExecutionResult:
        """Submit ``code`` to the judge and poll until it finishes.

        Never raises: submission failures, poll timeouts, unsupported
        languages and transport errors all come back in ``ExecutionResult.error``.
        """
        start = time.monotonic()
        try:
            language_id = self.language_id(language)

            async with httpx.AsyncClient(
                base_url=self._endpoint,
                headers=self._headers(),
                timeout=self._request_timeout_sec,
                transport=self._transport,
            ) as client:
                token = await self._submit(client, code, language_id)
                submission = await self._poll(client, token)

            result = _classify(submission, (time.monotonic() - start) * 1000)
            logger.info("Judge execution finished", language=language, summary=result.summary())
            return result

        except PollTimeoutError as e:
            logger.warning("Judge polling timed out", token=e.token, attempts=e.attempts)
            return ExecutionResult(
                output="",
                error=str(e),
                execution_time_ms=(time.monotonic() - start) * 1000,
            )

        except Exception as e:
            logger.warning("Judge execution error", language=language, error=str(e))
            return ExecutionResult(
                output="",
                error=str(e) or type(e).__name__,
                execution_time_ms=(time.monotonic() - start) * 1000,
            )

    async def _submit(self, client: httpx.AsyncClient, code: str, language_id: int) -> str:
        payload = {
            "source_code": code,
            "language_id": language_id,
            "stdin": "",
            "expected_output": "",
            "compile_only": False,
        }
        try:
            response = await client.post(
                "/submissions",
                json=payload,
                params={"base64_encoded": "false", "wait": "false"},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SubmissionError(f"Submission failed: {e}") from e

        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise SubmissionError("Submission failed: no token received from judge")

        logger.info("Judge submission accepted", token=token, language_id=language_id)
        return str(token)

    async def _poll(self, client: httpx.AsyncClient, token: str) -> dict[str, Any]:
        """Poll until a terminal status or the attempt ceiling."""
        for attempt in range(1, self._max_poll_attempts + 1):
            await self._sleep(self._poll_interval_sec)

            response = await client.get(
                f"/submissions/{token}",
                params={"base64_encoded": "false", "fields": _RESULT_FIELDS},
            )
            response.raise_for_status()
            submission = response.json()

            status_id = _status_id(submission)
            if status_id is None or status_id > STATUS_IN_PROGRESS_MAX:
                logger.debug("Judge submission terminal", token=token, status_id=status_id, attempts=attempt)
                return submission

        raise PollTimeoutError(token, self._max_poll_attempts)


def _status_id(submission: Any) -> int | None:
    if not isinstance(submission, dict):
        return None
    status = submission.get("status")
    if isinstance(status, dict) and status.get("id") is not None:
        return int(status["id"])
    return None


def _classify(submission: Any, elapsed_ms: float) -> ExecutionResult:
    """Turn a terminal judge submission into an ExecutionResult."""
    if not isinstance(submission, dict):
        submission = {}

    exit_code = submission.get("exit_code")
    exit_code = int(exit_code) if exit_code is not None else None

    if _status_id(submission) == STATUS_ACCEPTED:
        return ExecutionResult(
            output=submission.get("stdout") or "",
            exit_code=exit_code,
            execution_time_ms=elapsed_ms,
        )

    error = (
        submission.get("stderr")
        or submission.get("compile_output")
        or "Execution failed"
    )
    return ExecutionResult(
        output="",
        error=error,
        exit_code=exit_code,
        execution_time_ms=elapsed_ms,
    )
