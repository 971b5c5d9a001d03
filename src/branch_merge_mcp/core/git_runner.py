from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Protocol

from .errors import GitExecutionError
from .models import ProcessResult
from .security import resolve_root

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124


async def _kill_process_tree_windows(pid: int) -> None:
    """
    Kill a process tree on Windows (git may spawn helper processes such as
    credential managers, ssh, pagers, etc.).
    """
    killer = await asyncio.create_subprocess_exec(
        "taskkill", "/PID", str(pid), "/T", "/F",
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    await killer.wait()


def _kill_process_group_posix(p: asyncio.subprocess.Process) -> None:
    """
    Kill entire process group (the child runs in its own session).
    Falls back to p.kill() if the group is already gone.
    """
    try:
        os.killpg(p.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except OSError:
        try:
            p.kill()
        except ProcessLookupError:
            pass


def _clean_args(args: Iterable[str | None]) -> list[str]:
    return [a for a in args if a]


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def _read_into(stream: asyncio.StreamReader | None, chunks: list[bytes]) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            return
        chunks.append(chunk)


async def _drain_after_kill(
    proc: asyncio.subprocess.Process,
    out_chunks: list[bytes],
    err_chunks: list[bytes],
    grace_s: float = 0.5,
) -> None:
    """
    Collect what is left in the pipes once the child is dead. A surviving
    grandchild can hold a pipe open, hence the grace period.
    """
    try:
        await asyncio.wait_for(
            asyncio.gather(
                _read_into(proc.stdout, out_chunks),
                _read_into(proc.stderr, err_chunks),
            ),
            timeout=grace_s,
        )
    except asyncio.TimeoutError:
        pass


@dataclass(frozen=True)
class GitRunnerConfig:
    """
    Runner configuration.

    timeout_s=None means git runs until it exits on its own.
    max_output_chars only bounds what the tool layer returns; operations
    always see the full output.
    """
    git_executable: str = "git"
    timeout_s: float | None = None
    max_output_chars: int = 200_000
    env: Mapping[str, str] = field(default_factory=dict)


class CommandRunner(Protocol):
    async def run(self, args: Iterable[str | None]) -> ProcessResult: ...


class GitRunner:
    """
    Async git runner:
      - No shell, argv passed as discrete tokens
      - Enforces cwd=root
      - Non-interactive environment, C locale
      - Both streams fully drained before returning
      - Non-zero exit is a normal result; only launch failure raises
    """

    def __init__(self, root: str | Path, config: GitRunnerConfig | None = None) -> None:
        self.root = resolve_root(root)
        self.config = config or GitRunnerConfig()

    async def run(self, args: Iterable[str | None]) -> ProcessResult:
        argv = [self.config.git_executable, *_clean_args(args)]
        env = self._build_env()

        start = time.perf_counter()
        proc = await self._spawn(argv, env)
        stdout, stderr, exit_code, timed_out = await self._communicate(proc)
        duration_ms = int((time.perf_counter() - start) * 1000)

        result = ProcessResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            argv=argv,
            duration_ms=duration_ms,
            timed_out=timed_out,
        )
        logger.info("> %s", " ".join(argv))
        logger.info("%s", result.combined_output().rstrip("\n"))
        return result

    def _build_env(self) -> dict[str, str]:
        """
        Build a controlled environment that prevents interactive hangs.
        LC_ALL=C keeps git messages in English ("CONFLICT" detection relies on it).
        """
        merged_env = dict(os.environ)
        merged_env.update(
            {
                "GIT_TERMINAL_PROMPT": "0",
                "GCM_INTERACTIVE": "Never",
                "GIT_PAGER": "cat",
                "LC_ALL": "C",
            }
        )
        merged_env.update(self.config.env)
        return merged_env

    async def _spawn(self, argv: list[str], env: dict[str, str]) -> asyncio.subprocess.Process:
        # POSIX: own session so a timeout can kill the whole process group
        popen_kwargs: dict = {}
        if os.name != "nt":
            popen_kwargs["start_new_session"] = True

        try:
            return await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(self.root),
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **popen_kwargs,
            )
        except FileNotFoundError as e:
            raise GitExecutionError(f"{argv[0]} executable not found in PATH.") from e
        except OSError as e:
            raise GitExecutionError(f"Failed to spawn {argv[0]}: {type(e).__name__}: {e}") from e

    async def _communicate(self, proc: asyncio.subprocess.Process) -> tuple[str, str, int, bool]:
        """
        Read both pipes to EOF and reap the child.
        Returns: (stdout, stderr, exit_code, timed_out)

        Chunks are collected as they arrive, so a timeout still returns
        whatever git printed before it was killed. Any other interruption
        (task cancellation included) kills and reaps the child, then re-raises.
        """
        out_chunks: list[bytes] = []
        err_chunks: list[bytes] = []
        pump = asyncio.gather(
            _read_into(proc.stdout, out_chunks),
            _read_into(proc.stderr, err_chunks),
            proc.wait(),
        )
        try:
            await asyncio.wait_for(pump, timeout=self.config.timeout_s)
        except asyncio.TimeoutError:
            await self._kill(proc)
            await _drain_after_kill(proc, out_chunks, err_chunks)
            logger.warning("git timed out after %ss, process killed", self.config.timeout_s)
            return (
                _decode(b"".join(out_chunks)),
                _decode(b"".join(err_chunks)),
                TIMEOUT_EXIT_CODE,
                True,
            )
        except BaseException:
            await self._kill(proc)
            raise

        return _decode(b"".join(out_chunks)), _decode(b"".join(err_chunks)), int(proc.returncode or 0), False

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            if os.name == "nt":
                await _kill_process_tree_windows(proc.pid)
            else:
                _kill_process_group_posix(proc)
        await proc.wait()
