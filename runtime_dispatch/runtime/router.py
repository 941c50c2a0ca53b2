"""Language router — decides which backend runs a language."""

from __future__ import annotations

from runtime_dispatch.runtime.base import RuntimeEnvironment, RuntimeType
from runtime_dispatch.runtime.languages import JUDGE0_LANGUAGE_IDS, LOCAL_SANDBOX_LANGUAGES


def normalize_language(language: str) -> str:
    return (language or "").strip().lower()


def resolve_environment(language: str, version: str | None = None) -> RuntimeEnvironment:
    """Route a language to a backend.

    Languages in the local-sandbox allow-list run locally; everything else,
    unknown identifiers included, goes to the remote judge, which owns the
    unsupported-language boundary.
    """
    normalized = normalize_language(language)
    if normalized in LOCAL_SANDBOX_LANGUAGES:
        runtime_type = RuntimeType.LOCAL_SANDBOX
    else:
        runtime_type = RuntimeType.REMOTE_JUDGE
    return RuntimeEnvironment(type=runtime_type, language=normalized, version=version)


def supported_languages() -> dict[str, list[str]]:
    """Languages each backend knows how to run."""
    return {
        RuntimeType.LOCAL_SANDBOX.value: sorted(LOCAL_SANDBOX_LANGUAGES),
        RuntimeType.REMOTE_JUDGE.value: sorted(
            lang for lang in JUDGE0_LANGUAGE_IDS if lang not in LOCAL_SANDBOX_LANGUAGES
        ),
    }
