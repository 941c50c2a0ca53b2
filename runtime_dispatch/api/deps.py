"""FastAPI dependency injection — provides configured instances to route handlers."""

from __future__ import annotations

from functools import lru_cache

from runtime_dispatch.runtime.dispatcher import ExecutionDispatcher


@lru_cache(maxsize=1)
def get_dispatcher() -> ExecutionDispatcher:
    """Singleton execution dispatcher."""
    return ExecutionDispatcher()
