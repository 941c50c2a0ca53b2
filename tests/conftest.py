"""Shared pytest fixtures."""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping, Sequence

import httpx
import pytest


# ── Fake sandbox capability ───────────────────────────────────────────────────


class FakeProcess:
    """Deterministic sandbox process — no real subprocess."""

    def __init__(self, output: str = "", exit_code: int = 0) -> None:
        self._output = output
        self._exit_code = exit_code

    async def output(self) -> str:
        return self._output

    async def wait(self) -> int:
        return self._exit_code


class FakeSandbox:
    """In-memory sandbox handle that records every call."""

    def __init__(self, responses: dict[str, FakeProcess] | None = None) -> None:
        # Keyed by command ("node", "npm", "npx")
        self._responses = responses or {}
        self.files: dict[str, str] = {}
        self.mounts: list[dict[str, str]] = []
        self.spawns: list[tuple[str, list[str]]] = []
        self.teardowns = 0

    async def mount(self, files: Mapping[str, str]) -> None:
        self.mounts.append(dict(files))
        self.files.update(files)

    async def spawn(self, command: str, args: Sequence[str]) -> FakeProcess:
        self.spawns.append((command, list(args)))
        return self._responses.get(command, FakeProcess())

    async def teardown(self) -> None:
        self.teardowns += 1


class FakeBoot:
    """Boot function handing out FakeSandbox instances; counts calls."""

    def __init__(
        self,
        responses: dict[str, FakeProcess] | None = None,
        fail_times: int = 0,
    ) -> None:
        self._responses = responses
        self._fail_times = fail_times
        self.calls = 0
        self.sandboxes: list[FakeSandbox] = []

    async def __call__(self) -> FakeSandbox:
        self.calls += 1
        if self.calls <= self._fail_times:
            raise OSError("boot failed")
        sandbox = FakeSandbox(self._responses)
        self.sandboxes.append(sandbox)
        return sandbox

    @property
    def sandbox(self) -> FakeSandbox:
        return self.sandboxes[-1]


# ── Fake Judge0 service ───────────────────────────────────────────────────────


class FakeJudge:
    """Judge0 stand-in served through httpx.MockTransport.

    ``results`` is the sequence of GET bodies returned for successive polls;
    the last one repeats once exhausted.
    """

    def __init__(
        self,
        results: list[dict[str, Any]] | None = None,
        *,
        submit_status: int = 201,
        submit_body: dict[str, Any] | None = None,
        token: str = "tok-123",
    ) -> None:
        self._results = results or [{"status": {"id": 3}, "stdout": ""}]
        self._submit_status = submit_status
        self._submit_body = submit_body if submit_body is not None else {"token": token}
        self.submissions: list[dict[str, Any]] = []
        self.submit_headers: list[httpx.Headers] = []
        self.polls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/submissions":
            self.submissions.append(json.loads(request.content))
            self.submit_headers.append(request.headers)
            return httpx.Response(self._submit_status, json=self._submit_body)

        if request.method == "GET" and request.url.path.startswith("/submissions/"):
            body = self._results[min(self.polls, len(self._results) - 1)]
            self.polls += 1
            return httpx.Response(200, json=body)

        return httpx.Response(404, json={"error": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeClock:
    """Replacement for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.sleeps: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    @property
    def elapsed(self) -> float:
        return sum(self.sleeps)


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_boot() -> FakeBoot:
    """Boot function whose node process prints "2\\n" and exits 0."""
    return FakeBoot({"node": FakeProcess("2\n", 0)})


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_judge_backend(fake_clock: FakeClock) -> Callable[..., Any]:
    """Build a RemoteJudgeBackend wired to a FakeJudge and the fake clock."""
    from runtime_dispatch.runtime.remote_judge import RemoteJudgeBackend

    def _make(judge: FakeJudge, **kwargs: Any) -> RemoteJudgeBackend:
        return RemoteJudgeBackend(
            "https://judge.test",
            "test-key",
            transport=judge.transport,
            sleep=fake_clock,
            **kwargs,
        )

    return _make
