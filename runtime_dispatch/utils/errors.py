"""Custom exception hierarchy for the execution dispatcher."""

from __future__ import annotations


class DispatchError(Exception):
    """Base exception for all dispatcher errors."""

    def __init__(self, message: str, backend: str | None = None) -> None:
        self.backend = backend
        super().__init__(message)


class BackendInitializationError(DispatchError):
    """Sandbox failed to boot."""

    def __init__(self, message: str) -> None:
        super().__init__(message, backend="local-sandbox")


class NotInitializedError(DispatchError):
    """Operation requires a booted sandbox but the session is not ready."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(
            f"Sandbox not initialized: cannot {operation} while {state}",
            backend="local-sandbox",
        )


class UnsupportedLanguageError(DispatchError):
    """Backend has no mapping for the requested language."""

    def __init__(self, language: str, backend: str) -> None:
        self.language = language
        super().__init__(f"unsupported language: {language or '<empty>'}", backend=backend)


class SubmissionError(DispatchError):
    """Remote judge rejected the job or could not be reached."""

    def __init__(self, message: str) -> None:
        super().__init__(message, backend="remote-judge")


class ExecutionFailure(DispatchError):
    """Code ran (or tried to) but did not complete successfully."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        backend: str | None = None,
    ) -> None:
        self.exit_code = exit_code
        super().__init__(message, backend=backend)


class DependencyInstallError(ExecutionFailure):
    """Dependency install process exited with a nonzero status."""

    def __init__(self, exit_code: int, output: str = "") -> None:
        self.output = output
        message = f"Dependency install failed (exit {exit_code})"
        if output.strip():
            message = f"{message}: {output.strip()}"
        super().__init__(message, exit_code=exit_code, backend="local-sandbox")


class PollTimeoutError(DispatchError):
    """Judge polling ceiling reached without a terminal status."""

    def __init__(self, token: str, attempts: int) -> None:
        self.token = token
        self.attempts = attempts
        super().__init__("execution timed out", backend="remote-judge")
