"""Backend protocols, routing decision and execution result container."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Mapping, Protocol, Sequence, runtime_checkable


class RuntimeType(str, Enum):
    """Which backend handles a language."""

    LOCAL_SANDBOX = "local-sandbox"
    REMOTE_JUDGE = "remote-judge"


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Immutable routing decision produced by the language router."""

    type: RuntimeType
    language: str  # Lower-cased identifier
    version: str | None = None  # Reserved for backend-version pinning


@dataclass(frozen=True)
class ExecutionResult:
    """Immutable container for code execution results."""

    output: str = ""
    error: str | None = None
    exit_code: int | None = None
    execution_time_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return not self.succeeded

    def summary(self) -> str:
        """One-line summary for logging."""
        status = "OK" if self.succeeded else "FAIL"
        exit_part = f" | exit={self.exit_code}" if self.exit_code is not None else ""
        return f"[{status}] {self.execution_time_ms:.0f}ms{exit_part} | output={len(self.output)} chars"


@runtime_checkable
class ExecutionBackend(Protocol):
    """Uniform execution contract shared by every backend.

    Implementations:
    - LocalSandboxBackend: in-process sandbox session (javascript, typescript, node)
    - RemoteJudgeBackend: Judge0-compatible remote service (everything else)
    """

    async def execute_code(self, code: str, language: str) -> ExecutionResult:
        """Run ``code`` as ``language`` and return a normalized result.

        Never raises for execution failures; they are reported through
        ``ExecutionResult.error``.
        """
        ...


# ── Sandbox capability ────────────────────────────────────────────────────────


@runtime_checkable
class SandboxProcess(Protocol):
    """A process spawned inside a sandbox."""

    async def output(self) -> str:
        """Read the combined output stream to completion."""
        ...

    async def wait(self) -> int:
        """Wait for the process to exit and return its exit status."""
        ...


@runtime_checkable
class SandboxHandle(Protocol):
    """A booted sandbox: a private filesystem plus a process runner."""

    async def mount(self, files: Mapping[str, str]) -> None:
        """Write ``{relative_path: contents}`` into the sandbox filesystem."""
        ...

    async def spawn(self, command: str, args: Sequence[str]) -> SandboxProcess:
        """Start ``command args...`` inside the sandbox."""
        ...

    async def teardown(self) -> None:
        """Release every resource held by the sandbox."""
        ...


SandboxBoot = Callable[[], Awaitable[SandboxHandle]]
