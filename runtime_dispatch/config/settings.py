"""Application settings — single source of truth for all configuration."""

from __future__ import annotations

from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Env-driven configuration. All values overridable via environment variables."""

    # ── Core ──────────────────────────────────────────────────────────────
    ENV: Literal["dev", "staging", "prod"] = "dev"
    LOG_LEVEL: str = "INFO"

    # ── Remote Judge (Judge0-compatible) ──────────────────────────────────
    JUDGE0_API_URL: str = "https://judge0-ce.p.rapidapi.com"
    JUDGE0_API_KEY: str = ""
    JUDGE0_API_HOST: Optional[str] = None  # Derived from JUDGE0_API_URL when unset
    JUDGE0_POLL_INTERVAL_SEC: float = 1.0
    JUDGE0_MAX_POLL_ATTEMPTS: int = 30
    JUDGE0_REQUEST_TIMEOUT_SEC: float = 10.0
    JUDGE0_DEFAULT_LANGUAGE_ID: Optional[int] = None  # None = reject unknown languages

    # ── Local Sandbox ─────────────────────────────────────────────────────
    SANDBOX_ROOT_DIR: Optional[str] = None  # None = system temp dir
    SANDBOX_PROJECT_NAME: str = "sandbox-project"

    # ── API ───────────────────────────────────────────────────────────────
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def judge0_host(self) -> str:
        """Host header value for the judge, falling back to the endpoint's hostname."""
        return self.JUDGE0_API_HOST or urlparse(self.JUDGE0_API_URL).hostname or ""


settings = Settings()
