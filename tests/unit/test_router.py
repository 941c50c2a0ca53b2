"""Tests for language routing and the runtime factory."""

from __future__ import annotations

import pytest

from runtime_dispatch.config.backends import create_runtime
from runtime_dispatch.config.settings import settings
from runtime_dispatch.runtime.base import ExecutionBackend, RuntimeEnvironment, RuntimeType
from runtime_dispatch.runtime.local_sandbox import LocalSandboxBackend, SessionState
from runtime_dispatch.runtime.remote_judge import RemoteJudgeBackend
from runtime_dispatch.runtime.router import resolve_environment, supported_languages


class TestResolveEnvironment:
    @pytest.mark.parametrize("language", ["javascript", "typescript", "node", "JavaScript", "NODE", " TypeScript "])
    def test_local_languages(self, language: str) -> None:
        env = resolve_environment(language)
        assert env.type is RuntimeType.LOCAL_SANDBOX
        assert env.language == language.strip().lower()

    @pytest.mark.parametrize("language", ["python", "Java", "cpp", "cobol", ""])
    def test_everything_else_goes_to_judge(self, language: str) -> None:
        env = resolve_environment(language)
        assert env.type is RuntimeType.REMOTE_JUDGE
        assert env.language == language.lower()

    def test_version_is_carried_not_used(self) -> None:
        env = resolve_environment("python", version="3.11")
        assert env.version == "3.11"
        assert env.type is RuntimeType.REMOTE_JUDGE

    def test_environment_is_immutable(self) -> None:
        env = resolve_environment("python")
        with pytest.raises(AttributeError):
            env.language = "go"  # type: ignore[misc]

    def test_runtime_type_values(self) -> None:
        assert RuntimeType.LOCAL_SANDBOX.value == "local-sandbox"
        assert RuntimeType.REMOTE_JUDGE.value == "remote-judge"

    def test_supported_languages_are_disjoint(self) -> None:
        languages = supported_languages()
        local = set(languages["local-sandbox"])
        remote = set(languages["remote-judge"])
        assert local == {"javascript", "typescript", "node"}
        assert "python" in remote
        assert not local & remote


class TestCreateRuntime:
    def test_local_sandbox_is_fresh_and_uninitialized(self) -> None:
        env = RuntimeEnvironment(type=RuntimeType.LOCAL_SANDBOX, language="javascript")
        first = create_runtime(env)
        second = create_runtime(env)
        assert isinstance(first, LocalSandboxBackend)
        assert first.state is SessionState.UNINITIALIZED
        assert first is not second

    def test_remote_judge_uses_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "JUDGE0_API_URL", "https://judge.example.com/")
        monkeypatch.setattr(settings, "JUDGE0_API_KEY", "secret")
        monkeypatch.setattr(settings, "JUDGE0_MAX_POLL_ATTEMPTS", 5)

        backend = create_runtime(RuntimeEnvironment(type=RuntimeType.REMOTE_JUDGE, language="python"))

        assert isinstance(backend, RemoteJudgeBackend)
        assert backend.endpoint == "https://judge.example.com"
        assert backend.api_key == "secret"
        assert backend.max_poll_attempts == 5

    def test_default_judge_configuration(self) -> None:
        assert settings.JUDGE0_API_URL == "https://judge0-ce.p.rapidapi.com"
        assert settings.judge0_host == "judge0-ce.p.rapidapi.com"

    def test_backends_satisfy_protocol(self) -> None:
        for runtime_type in RuntimeType:
            backend = create_runtime(RuntimeEnvironment(type=runtime_type, language="x"))
            assert isinstance(backend, ExecutionBackend)
