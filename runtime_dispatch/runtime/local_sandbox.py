"""Local sandbox backend — lifecycle-managed wrapper around a sandbox capability."""

from __future__ import annotations

import asyncio
import json
import time
from enum import Enum
from typing import Mapping

from runtime_dispatch.config.settings import settings
from runtime_dispatch.runtime.base import (
    ExecutionResult,
    RuntimeType,
    SandboxBoot,
    SandboxHandle,
)
from runtime_dispatch.runtime.languages import SANDBOX_LANGUAGES, SandboxLanguage
from runtime_dispatch.runtime.router import normalize_language
from runtime_dispatch.runtime.subprocess_container import SubprocessContainer
from runtime_dispatch.utils.errors import (
    BackendInitializationError,
    DependencyInstallError,
    NotInitializedError,
    UnsupportedLanguageError,
)
from runtime_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    """Lifecycle of one sandbox session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    TORN_DOWN = "torn_down"


class LocalSandboxBackend:
    """Runs javascript/typescript inside an exclusively owned sandbox handle.

    Lifecycle: ``initialize()`` → any number of ``execute_code()`` /
    ``install_dependencies()`` → ``cleanup()``. A cleaned-up session may be
    initialized again.

    Executions against one session are serialized: every call mounts the
    same entry file, so they queue on an internal lock rather than race.
    """

    def __init__(
        self,
        boot: SandboxBoot | None = None,
        project_name: str | None = None,
    ) -> None:
        self._boot = boot or SubprocessContainer.boot
        self._project_name = project_name or settings.SANDBOX_PROJECT_NAME
        self._handle: SandboxHandle | None = None
        self._state = SessionState.UNINITIALIZED
        self._lifecycle_lock = asyncio.Lock()
        self._exec_lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    def _require_ready(self, operation: str) -> SandboxHandle:
        if self._state is not SessionState.READY or self._handle is None:
            raise NotInitializedError(operation, self._state.value)
        return self._handle

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Boot the sandbox once. Repeated or concurrent calls are no-ops.

        Raises:
            BackendInitializationError: boot failed; the session stays unusable
                and ``initialize()`` may be retried.
        """
        async with self._lifecycle_lock:
            if self._state is SessionState.READY:
                return

            previous = self._state
            self._state = SessionState.INITIALIZING
            try:
                self._handle = await self._boot()
            except Exception as e:
                self._state = previous
                self._handle = None
                logger.error("Sandbox boot failed", error=str(e))
                raise BackendInitializationError(
                    f"Failed to initialize runtime environment: {e}"
                ) from e

            self._state = SessionState.READY
            logger.info("Sandbox initialized")

    async def cleanup(self) -> None:
        """Tear down the sandbox handle if present. Idempotent.

        Waits for an in-flight execution to return; queued ones then fail
        with ``NotInitializedError``.
        """
        async with self._lifecycle_lock, self._exec_lock:
            handle, self._handle = self._handle, None
            if handle is not None:
                try:
                    await handle.teardown()
                finally:
                    self._state = SessionState.TORN_DOWN
                    logger.info("Sandbox torn down")
            elif self._state is SessionState.READY:
                self._state = SessionState.TORN_DOWN

    # ── Operations ────────────────────────────────────────────────────────

    async def install_dependencies(self, dependencies: Mapping[str, str]) -> None:
        """Write a package manifest with exactly ``dependencies`` and run ``npm install``.

        Raises:
            NotInitializedError: session is not ready.
            DependencyInstallError: the install process exited nonzero.
        """
        self._require_ready("install dependencies")
        async with self._exec_lock:
            handle = self._require_ready("install dependencies")
            await self._install(handle, dependencies)

    async def _install(self, handle: SandboxHandle, dependencies: Mapping[str, str]) -> None:
        manifest = {
            "name": self._project_name,
            "version": "1.0.0",
            "dependencies": dict(dependencies),
        }
        await handle.mount({"package.json": json.dumps(manifest, indent=2)})

        process = await handle.spawn("npm", ["install"])
        output = await process.output()
        exit_code = await process.wait()

        if exit_code != 0:
            logger.warning("Dependency install failed", exit_code=exit_code, packages=sorted(dependencies))
            raise DependencyInstallError(exit_code, output)

        logger.info("Dependencies installed", packages=sorted(dependencies))

    async def execute_code(self, code: str, language: str = "javascript") -> ExecutionResult:
        """Mount ``code`` as the entry file and run it.

        Only an uninitialized session raises (``NotInitializedError``); every
        other failure is returned in ``ExecutionResult.error``.
        """
        self._require_ready("execute code")
        async with self._exec_lock:
            handle = self._require_ready("execute code")
            return await self._run(handle, code, normalize_language(language))

    async def _run(self, handle: SandboxHandle, code: str, language: str) -> ExecutionResult:
        start = time.monotonic()
        try:
            spec = _sandbox_language(language)

            # 1-2. Mount the entry file (overwrites any previous run)
            await handle.mount({spec.file_name: code})

            # 3. Toolchain for transpiled languages
            if spec.toolchain:
                await self._install(handle, spec.toolchain)

            # 4-5. Run and collect
            process = await handle.spawn(spec.command, list(spec.args))
            output = await process.output()
            exit_code = await process.wait()

            elapsed_ms = (time.monotonic() - start) * 1000
            error = None if exit_code == 0 else f"process exited with code {exit_code}"
            result = ExecutionResult(
                output=output if isinstance(output, str) else "",
                error=error,
                exit_code=exit_code,
                execution_time_ms=elapsed_ms,
            )
            logger.info("Sandbox execution finished", language=language, summary=result.summary())
            return result

        except Exception as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            logger.warning("Sandbox execution error", language=language, error=str(e))
            return ExecutionResult(
                output="",
                error=str(e) or type(e).__name__,
                execution_time_ms=elapsed_ms,
            )


def _sandbox_language(language: str) -> SandboxLanguage:
    try:
        return SANDBOX_LANGUAGES[language]
    except KeyError:
        raise UnsupportedLanguageError(language, RuntimeType.LOCAL_SANDBOX.value) from None
