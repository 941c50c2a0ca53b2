"""Runtime factory — single function to build the backend for a routing decision."""

from __future__ import annotations

from runtime_dispatch.config.settings import settings
from runtime_dispatch.runtime.base import ExecutionBackend, RuntimeEnvironment, RuntimeType


def create_runtime(env: RuntimeEnvironment) -> ExecutionBackend:
    """
    Factory function. Returns a freshly constructed backend.

    Args:
        env: Routing decision from ``resolve_environment``.

    Returns:
        An uninitialized LocalSandboxBackend, or a RemoteJudgeBackend
        configured from settings. Booting the sandbox is the caller's job.
    """
    if env.type is RuntimeType.LOCAL_SANDBOX:
        from runtime_dispatch.runtime.local_sandbox import LocalSandboxBackend

        return LocalSandboxBackend()
    elif env.type is RuntimeType.REMOTE_JUDGE:
        from runtime_dispatch.runtime.remote_judge import RemoteJudgeBackend

        return RemoteJudgeBackend(
            settings.JUDGE0_API_URL,
            settings.JUDGE0_API_KEY,
            api_host=settings.judge0_host,
            poll_interval_sec=settings.JUDGE0_POLL_INTERVAL_SEC,
            max_poll_attempts=settings.JUDGE0_MAX_POLL_ATTEMPTS,
            request_timeout_sec=settings.JUDGE0_REQUEST_TIMEOUT_SEC,
            default_language_id=settings.JUDGE0_DEFAULT_LANGUAGE_ID,
        )
    else:
        raise ValueError(
            f"Unknown runtime type: {env.type!r}. Must be 'local-sandbox' or 'remote-judge'."
        )
