"""Execution dispatcher — routes a snippet to a backend and drives it to a result."""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from runtime_dispatch.config.backends import create_runtime
from runtime_dispatch.runtime.base import (
    ExecutionBackend,
    ExecutionResult,
    RuntimeEnvironment,
    RuntimeType,
)
from runtime_dispatch.runtime.local_sandbox import LocalSandboxBackend
from runtime_dispatch.runtime.router import resolve_environment
from runtime_dispatch.utils.errors import BackendInitializationError
from runtime_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


class ExecutionDispatcher:
    """Owns one backend per runtime type for the lifetime of the dispatcher.

    The local sandbox session is booted lazily on first use and reused;
    ``close()`` tears it down.
    """

    def __init__(
        self,
        runtime_factory: Callable[[RuntimeEnvironment], ExecutionBackend] = create_runtime,
    ) -> None:
        self._runtime_factory = runtime_factory
        self._backends: dict[RuntimeType, ExecutionBackend] = {}
        self._lock = asyncio.Lock()

    async def _backend_for(self, env: RuntimeEnvironment) -> ExecutionBackend:
        async with self._lock:
            backend = self._backends.get(env.type)
            if backend is None:
                backend = self._runtime_factory(env)
                self._backends[env.type] = backend
                logger.info("Backend created", runtime=env.type.value)

        if isinstance(backend, LocalSandboxBackend) and not backend.is_ready:
            await backend.initialize()
        return backend

    async def execute(self, code: str, language: str) -> tuple[RuntimeEnvironment, ExecutionResult]:
        """Run ``code`` as ``language``. Never raises for execution or boot failures.

        Returns:
            The routing decision and the backend's result.
        """
        env = resolve_environment(language)
        start = time.monotonic()
        try:
            backend = await self._backend_for(env)
        except BackendInitializationError as e:
            return env, ExecutionResult(
                output="",
                error=str(e),
                execution_time_ms=(time.monotonic() - start) * 1000,
            )

        logger.debug("Dispatching execution", runtime=env.type.value, language=env.language)
        result = await backend.execute_code(code, env.language)
        return env, result

    async def close(self) -> None:
        """Release backend resources."""
        async with self._lock:
            backends, self._backends = self._backends, {}
        for backend in backends.values():
            if isinstance(backend, LocalSandboxBackend):
                await backend.cleanup()
        logger.info("Dispatcher closed")
