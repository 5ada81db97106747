"""Infrastructure: spawn and supervise exactly one child process.

This module is the **only** place in the codebase that talks to
:mod:`subprocess`.  Every ``OSError`` raised while spawning is caught
here and re-raised as :class:`~argdeck.exceptions.SpawnError`.

Concurrency model
-----------------
* Two daemon reader threads, one per output stream, each with its own
  incremental UTF-8 decoder, append to a shared :class:`OutputBuffer`.
* Inline stdin text is written by a third short-lived thread, then the
  pipe is closed.
* Status checks (:meth:`ChildProcess.is_running`) and output snapshots
  never block the calling thread.  :meth:`ChildProcess.wait` gives the
  readers a bounded grace period, so a grandchild that inherited the
  pipes cannot hold the caller.
* Bytes of one stream keep their order; no ordering is guaranteed
  between stdout and stderr.
"""

from __future__ import annotations

import codecs
import os
import subprocess
import threading
import time
from typing import IO, Any, NoReturn

from loguru import logger

from argdeck.core.models import ExecutionRequest, FileInput, InlineText, ProcessState, ProcessStatus
from argdeck.exceptions import EmptyEnvKeyError, SpawnError

_READ_CHUNK = 4096
_DRAIN_GRACE = 1.0
"""Seconds to wait for the output readers once the child has exited."""


# ---------------------------------------------------------------------------
# Output buffer
# ---------------------------------------------------------------------------

class OutputBuffer:
    """Append-only text shared between reader threads and the UI thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._chunks: list[str] = []
        self._length = 0

    def append(self, text: str) -> None:
        if not text:
            return
        with self._lock:
            self._chunks.append(text)
            self._length += len(text)

    def snapshot(self) -> str:
        with self._lock:
            if len(self._chunks) > 1:
                self._chunks = ["".join(self._chunks)]
            return self._chunks[0] if self._chunks else ""

    def __len__(self) -> int:
        with self._lock:
            return self._length


# ---------------------------------------------------------------------------
# Child process handle
# ---------------------------------------------------------------------------

class ChildProcess:
    """Supervised child process built from an :class:`ExecutionRequest`.

    Satisfies :class:`~argdeck.core.protocols.ChildHandle` structurally.
    The handle starts in ``NOT_STARTED``; :meth:`start` moves it to
    ``RUNNING`` or ``SPAWN_FAILED``.  From ``RUNNING`` it reaches
    ``EXITED`` once the process terminates on its own, or ``KILLED``
    after :meth:`kill`.
    """

    def __init__(self, request: ExecutionRequest) -> None:
        self.request: ExecutionRequest = request
        self._buffer = OutputBuffer()
        self._lock = threading.Lock()
        self._status: ProcessStatus = ProcessStatus.not_started()
        self._popen: subprocess.Popen[bytes] | None = None
        self._threads: list[threading.Thread] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def status(self) -> ProcessStatus:
        self._refresh()
        with self._lock:
            return self._status

    @property
    def pid(self) -> int | None:
        return self._popen.pid if self._popen is not None else None

    def output(self) -> str:
        return self._buffer.snapshot()

    def is_running(self) -> bool:
        return self.status.state is ProcessState.RUNNING

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the child described by :attr:`request`.

        Raises
        ------
        EmptyEnvKeyError
            When an environment override has an empty key.  Nothing is
            spawned and the status stays ``NOT_STARTED``.
        SpawnError
            When the executable, working directory or stdin file cannot
            be used.  The status becomes ``SPAWN_FAILED``.
        """
        request = self.request
        if any(not key for key, _ in request.env_overrides):
            raise EmptyEnvKeyError()
        with self._lock:
            if self._status.state is not ProcessState.NOT_STARTED:
                raise SpawnError("process has already been started")
        if not request.argv:
            self._fail("empty argument vector")

        env = dict(os.environ)
        env.update(request.env_overrides)

        stdin_file: IO[bytes] | None = None
        stdin_arg: Any = subprocess.DEVNULL
        source = request.stdin_source
        if isinstance(source, InlineText):
            stdin_arg = subprocess.PIPE
        elif isinstance(source, FileInput):
            try:
                stdin_file = open(source.path, "rb")  # noqa: SIM115
            except OSError as exc:
                self._fail(f"cannot open stdin file {source.path!r}: {exc}", exc)
            stdin_arg = stdin_file

        try:
            popen = subprocess.Popen(  # noqa: S603
                list(request.argv),
                stdin=stdin_arg,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=request.working_directory or None,
                env=env,
            )
        except OSError as exc:
            self._fail(f"cannot start {request.argv[0]!r}: {exc}", exc)
        finally:
            if stdin_file is not None:
                stdin_file.close()

        with self._lock:
            self._popen = popen
            self._status = ProcessStatus.running()
        logger.info("Spawned pid={} argv={}", popen.pid, list(request.argv))

        self._start_thread("stdout", self._drain, popen.stdout)
        self._start_thread("stderr", self._drain, popen.stderr)
        if isinstance(source, InlineText):
            self._start_thread("stdin", self._feed, popen.stdin, source.text)

    def kill(self) -> None:
        """Kill the child and wait for it; a no-op unless it is running."""
        with self._lock:
            if self._status.state is not ProcessState.RUNNING or self._popen is None:
                return
            popen = self._popen
            # Polled under the lock: a child that already ended keeps its code.
            code = popen.poll()
            if code is None:
                try:
                    popen.kill()
                except ProcessLookupError:
                    pass
                popen.wait()
                self._status = ProcessStatus.killed()
            else:
                self._status = ProcessStatus.exited(code)
        if code is None:
            logger.info("Killed pid={}", popen.pid)
        else:
            logger.info("Process pid={} exited with code {}", popen.pid, code)

    def wait(self, timeout: float | None = None) -> ProcessStatus:
        """Block until the child terminates, then let its output drain.

        The readers get at most ``_DRAIN_GRACE`` seconds after the exit.
        A grandchild that inherited stdout or stderr keeps the pipes open
        past that; its later output still lands in :meth:`output`.

        Raises
        ------
        subprocess.TimeoutExpired
            When *timeout* elapses before the child terminates.
        """
        popen = self._popen
        if popen is None:
            return self.status
        popen.wait(timeout=timeout)
        deadline = time.monotonic() + _DRAIN_GRACE
        for thread in self._threads:
            thread.join(max(0.0, deadline - time.monotonic()))
        if any(thread.is_alive() for thread in self._threads):
            logger.debug("Output of pid={} still open after exit", popen.pid)
        return self.status

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        with self._lock:
            if self._status.state is not ProcessState.RUNNING or self._popen is None:
                return
            code = self._popen.poll()
            if code is None:
                return
            self._status = ProcessStatus.exited(code)
        logger.info("Process pid={} exited with code {}", self._popen.pid, code)

    def _fail(self, message: str, cause: BaseException | None = None) -> NoReturn:
        with self._lock:
            self._status = ProcessStatus.spawn_failed(message)
        logger.warning("Spawn failed: {}", message)
        raise SpawnError(message) from cause

    def _start_thread(self, name: str, target: Any, *args: Any) -> None:
        thread = threading.Thread(
            target=target,
            args=args,
            name=f"argdeck-{name}",
            daemon=True,
        )
        self._threads.append(thread)
        thread.start()

    def _drain(self, stream: IO[bytes] | None) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                chunk = stream.read1(_READ_CHUNK)  # type: ignore[attr-defined]
                if not chunk:
                    break
                self._buffer.append(decoder.decode(chunk))
            self._buffer.append(decoder.decode(b"", final=True))
        finally:
            stream.close()

    def _feed(self, stream: IO[bytes] | None, text: str) -> None:
        if stream is None:
            return
        try:
            stream.write(text.encode("utf-8"))
        except (BrokenPipeError, ValueError):
            # The child exited or closed its input early.
            pass
        finally:
            try:
                stream.close()
            except BrokenPipeError:
                pass


def spawn(request: ExecutionRequest) -> ChildProcess:
    """Create a :class:`ChildProcess` for *request* and start it."""
    process = ChildProcess(request)
    process.start()
    return process
