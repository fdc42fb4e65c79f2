"""External command runner: asyncio subprocesses with sanitized line capture."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from dataclasses import dataclass, field
from typing import Callable

from hoverpick.sanitize import strip_ansi
from hoverpick.scheduling import LoopScheduler, Scheduler

logger = logging.getLogger(__name__)

# Keep pagers and colorizers of the invoked tool quiet even in batch mode.
DEFAULT_ENV: dict[str, str] = {
    "NO_COLOR": "1",
    "TERM": "dumb",
    "PAGER": "cat",
    "LESS": "FRX",
    "LESSANSIENDCHARS": "mK",
}

_STREAM_LIMIT = 1024 * 1024  # 1 MB per line


class JobAlreadyStarted(RuntimeError):
    """Raised when a :class:`CommandJob` is handed to a runner twice."""


@dataclass
class CommandJob:
    """One external-process invocation and its captured output."""

    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)
    exit_code: int | None = None
    started: bool = False

    @property
    def program(self) -> str:
        return self.argv[0] if self.argv else ""


ExitCallback = Callable[[int, list[str], list[str]], None]
SpawnErrorCallback = Callable[[CommandJob, OSError], None]


def build_env(
    overrides: dict[str, str] | None = None,
    base: dict[str, str] | None = None,
) -> dict[str, str]:
    """Merge the inherited environment, :data:`DEFAULT_ENV` and *overrides*."""
    env = dict(os.environ if base is None else base)
    env.update(DEFAULT_ENV)
    if overrides:
        env.update(overrides)
    return env


def _append_line(sink: list[str], raw: bytes) -> None:
    line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
    if line:
        sink.append(strip_ansi(line) or "")


async def _read_lines(
    stream: asyncio.StreamReader | None, sink: list[str]
) -> None:
    """Collect newline-separated lines from *stream* until EOF.

    A line longer than the stream limit keeps its first chunk; the rest of
    it is read and dropped.
    """
    if stream is None:
        return
    overlong = False
    while True:
        try:
            raw = await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            raw = exc.partial
        except asyncio.LimitOverrunError as exc:
            chunk = await stream.readexactly(exc.consumed)
            if not overlong:
                logger.warning("output line over %d bytes truncated", _STREAM_LIMIT)
                _append_line(sink, chunk)
            overlong = True
            continue
        if not raw:
            break
        if not overlong:
            _append_line(sink, raw)
        overlong = False


class CommandRunner:
    """Spawns :class:`CommandJob` processes without blocking the caller.

    Completion callbacks are delivered through *scheduler*, never from inside
    the coroutine that observed the process exit. Each spawned job completes
    exactly once: either ``on_spawn_error`` or ``on_exit``.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._loop = loop
        self._scheduler = scheduler or LoopScheduler(loop)
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> int:
        """Number of jobs whose driver task has not finished yet."""
        return len(self._tasks)

    def start(
        self,
        job: CommandJob,
        on_exit: ExitCallback,
        on_spawn_error: SpawnErrorCallback,
    ) -> asyncio.Task[None]:
        if job.started:
            raise JobAlreadyStarted(f"job already started: {job.argv!r}")
        if not job.argv:
            raise ValueError("CommandJob.argv must name a program")
        job.started = True
        task = self.loop.create_task(self._drive(job, on_exit, on_spawn_error))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("command task failed: %r", exc, exc_info=exc)

    async def _drive(
        self,
        job: CommandJob,
        on_exit: ExitCallback,
        on_spawn_error: SpawnErrorCallback,
    ) -> None:
        logger.debug("spawning %s", job.argv)
        try:
            proc = await asyncio.create_subprocess_exec(
                *job.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=build_env(job.env),
                limit=_STREAM_LIMIT,
            )
        except OSError as exc:
            logger.warning("failed to start %s: %s", job.program, exc)
            self._scheduler.schedule(lambda: on_spawn_error(job, exc))
            return

        try:
            await asyncio.gather(
                _read_lines(proc.stdout, job.stdout_lines),
                _read_lines(proc.stderr, job.stderr_lines),
            )
        except Exception:
            logger.exception("reading output of %s failed", job.program)
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
        code = await proc.wait()
        job.exit_code = code
        logger.debug(
            "%s exited with %d (%d stdout, %d stderr lines)",
            job.program,
            code,
            len(job.stdout_lines),
            len(job.stderr_lines),
        )
        self._scheduler.schedule(
            lambda: on_exit(code, job.stdout_lines, job.stderr_lines)
        )
