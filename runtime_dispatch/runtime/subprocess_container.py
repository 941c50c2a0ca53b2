"""Subprocess-based sandbox capability — a temp directory plus host processes."""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Sequence

from runtime_dispatch.config.settings import settings
from runtime_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


class ContainerProcess:
    """A running subprocess with stderr merged into stdout."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self._process = process
        self._output: str | None = None

    @property
    def pid(self) -> int:
        return self._process.pid

    async def output(self) -> str:
        """Read the combined output stream to EOF. Repeated calls return the cached text."""
        if self._output is None:
            assert self._process.stdout is not None
            data = await self._process.stdout.read()
            self._output = data.decode("utf-8", errors="replace")
        return self._output

    async def wait(self) -> int:
        # Pipe must be drained before wait() or a full buffer deadlocks
        await self.output()
        return await self._process.wait()


class SubprocessContainer:
    """Sandbox capability backed by a private working directory.

    The container is the filesystem root for mounted files and the cwd for
    every spawned process. It provides:
    - Working directory isolation
    - Path confinement for mounts
    - Combined stdout/stderr capture
    - Teardown that removes everything it created
    """

    def __init__(self, root: Path, env_vars: dict[str, str] | None = None) -> None:
        self._root = root
        self._env = os.environ.copy()
        self._env["NO_COLOR"] = "1"
        self._env["NPM_CONFIG_UPDATE_NOTIFIER"] = "false"
        if env_vars:
            self._env.update(env_vars)
        self._torn_down = False

    @classmethod
    async def boot(
        cls,
        root_dir: str | None = None,
        env_vars: dict[str, str] | None = None,
    ) -> SubprocessContainer:
        """Create a fresh container under ``root_dir`` (or the system temp dir)."""
        base = root_dir or settings.SANDBOX_ROOT_DIR
        if base:
            Path(base).mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix="sandbox_", dir=base))
        logger.info("Container booted", root=str(root))
        return cls(root, env_vars=env_vars)

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, relative_path: str) -> Path:
        target = (self._root / relative_path).resolve()
        if target != self._root.resolve() and self._root.resolve() not in target.parents:
            raise ValueError(f"Path escapes sandbox root: {relative_path}")
        return target

    async def mount(self, files: Mapping[str, str]) -> None:
        """Write files into the container, overwriting existing paths."""
        self._check_alive()
        for relative_path, contents in files.items():
            target = self._resolve(relative_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding="utf-8")
        logger.debug("Files mounted", paths=sorted(files))

    async def spawn(self, command: str, args: Sequence[str]) -> ContainerProcess:
        """Start a process in the container root."""
        self._check_alive()
        executable = shutil.which(command, path=self._env.get("PATH")) or command
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=str(self._root),
            env=self._env,
        )
        logger.debug("Process spawned", command=command, args=list(args), pid=process.pid)
        return ContainerProcess(process)

    async def teardown(self) -> None:
        """Remove the container directory. Safe to call more than once."""
        if self._torn_down:
            return
        self._torn_down = True
        shutil.rmtree(self._root, ignore_errors=True)
        logger.info("Container torn down", root=str(self._root))

    def _check_alive(self) -> None:
        if self._torn_down:
            raise RuntimeError("Container has been torn down")
