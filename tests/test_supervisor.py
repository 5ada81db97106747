"""Tests for the child process supervisor (infra/supervisor.py).

Children are short ``sys.executable -c`` scripts so the suite runs the
same on every platform; ``echo`` is used only where it exists.
"""

from __future__ import annotations

import shutil
import sys
import threading
import time
from pathlib import Path

import pytest

from argdeck.core.models import ExecutionRequest, FileInput, InlineText, ProcessState, ProcessStatus
from argdeck.exceptions import EmptyEnvKeyError, SpawnError
from argdeck.infra.supervisor import ChildProcess, OutputBuffer, spawn


def _python(code: str, **overrides: object) -> ExecutionRequest:
    return ExecutionRequest(argv=(sys.executable, "-c", code), **overrides)  # type: ignore[arg-type]


def _run(request: ExecutionRequest) -> ChildProcess:
    process = spawn(request)
    process.wait(timeout=30)
    return process


_SLEEPER = "import time; time.sleep(30)"


# ---------------------------------------------------------------------------
# OutputBuffer
# ---------------------------------------------------------------------------

class TestOutputBuffer:
    def test_append_and_snapshot(self) -> None:
        buffer = OutputBuffer()
        buffer.append("ab")
        buffer.append("")
        buffer.append("cd")
        assert buffer.snapshot() == "abcd"
        assert len(buffer) == 4

    def test_concurrent_appends_keep_every_chunk(self) -> None:
        buffer = OutputBuffer()

        def writer() -> None:
            for _ in range(500):
                buffer.append("x")

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert buffer.snapshot() == "x" * 2000


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_initial_status(self) -> None:
        process = ChildProcess(_python("pass"))
        assert process.status == ProcessStatus.not_started()
        assert process.pid is None
        assert not process.is_running()

    @pytest.mark.skipif(shutil.which("echo") is None, reason="echo not available")
    def test_echo_hello(self) -> None:
        process = _run(ExecutionRequest(argv=("echo", "hello")))
        assert process.status == ProcessStatus.exited(0)
        assert process.output() in ("hello\n", "hello\r\n")

    def test_python_exit_code(self) -> None:
        process = _run(_python("import sys; sys.exit(3)"))
        assert process.status == ProcessStatus.exited(3)

    def test_stdout_and_stderr_captured(self) -> None:
        process = _run(_python("import sys; print('out'); print('err', file=sys.stderr)"))
        output = process.output()
        assert "out" in output
        assert "err" in output

    def test_invalid_utf8_is_replaced(self) -> None:
        process = _run(_python("import sys; sys.stdout.buffer.write(b'a\\xffb')"))
        assert process.output() == "a\ufffdb"

    def test_running_then_exited(self) -> None:
        process = spawn(_python("import time; time.sleep(0.5)"))
        assert process.is_running()
        assert process.pid is not None
        process.wait(timeout=30)
        assert not process.is_running()

    def test_second_start_rejected(self) -> None:
        process = _run(_python("pass"))
        with pytest.raises(SpawnError):
            process.start()


# ---------------------------------------------------------------------------
# Kill
# ---------------------------------------------------------------------------

class TestKill:
    def test_kill_long_running(self) -> None:
        process = spawn(_python(_SLEEPER))
        process.kill()
        assert process.status == ProcessStatus.killed()

    def test_second_kill_is_noop(self) -> None:
        process = spawn(_python(_SLEEPER))
        process.kill()
        process.kill()
        assert process.status == ProcessStatus.killed()

    def test_kill_after_exit_is_noop(self) -> None:
        process = _run(_python("pass"))
        process.kill()
        assert process.status == ProcessStatus.exited(0)

    def test_kill_after_unobserved_exit_keeps_exit_code(self) -> None:
        process = spawn(_python("import sys; sys.exit(3)"))
        # Reap the child without refreshing the tracked status.
        process._popen.wait(timeout=30)  # type: ignore[union-attr]
        process.kill()
        assert process.status == ProcessStatus.exited(3)

    def test_kill_before_start_is_noop(self) -> None:
        process = ChildProcess(_python("pass"))
        process.kill()
        assert process.status == ProcessStatus.not_started()

    def test_status_poll_does_not_block(self) -> None:
        process = spawn(_python(_SLEEPER))
        try:
            started = time.monotonic()
            for _ in range(50):
                assert process.is_running()
            assert time.monotonic() - started < 5
        finally:
            process.kill()


# ---------------------------------------------------------------------------
# Wait
# ---------------------------------------------------------------------------

class TestWait:
    def test_grandchild_holding_pipes_does_not_block(self) -> None:
        spawn_grandchild = (
            "import subprocess, sys; "
            f"subprocess.Popen([{sys.executable!r}, '-c', 'import time; time.sleep(6)']); "
            "print('parent done', flush=True)"
        )
        process = spawn(_python(spawn_grandchild))

        started = time.monotonic()
        status = process.wait(timeout=30)

        assert time.monotonic() - started < 4
        assert status == ProcessStatus.exited(0)
        assert "parent done" in process.output()

    def test_wait_after_kill_with_grandchild_returns(self) -> None:
        spawn_grandchild = (
            "import subprocess, sys, time; "
            f"subprocess.Popen([{sys.executable!r}, '-c', 'import time; time.sleep(6)']); "
            "print('ready', flush=True); time.sleep(30)"
        )
        process = spawn(_python(spawn_grandchild))
        deadline = time.monotonic() + 20
        while "ready" not in process.output() and time.monotonic() < deadline:
            time.sleep(0.05)
        process.kill()

        started = time.monotonic()
        status = process.wait()

        assert time.monotonic() - started < 4
        assert status == ProcessStatus.killed()


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------

class TestRequestOptions:
    def test_empty_env_key_rejected_before_spawn(self) -> None:
        process = ChildProcess(_python("pass", env_overrides=(("", "x"),)))
        with pytest.raises(EmptyEnvKeyError):
            process.start()
        assert process.status == ProcessStatus.not_started()
        assert process.pid is None

    def test_env_override(self) -> None:
        request = _python(
            "import os; print(os.environ['ARGDECK_TEST'])",
            env_overrides=(("ARGDECK_TEST", "first"), ("ARGDECK_TEST", "second")),
        )
        assert _run(request).output().strip() == "second"

    def test_inherits_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARGDECK_INHERITED", "yes")
        request = _python("import os; print(os.environ.get('ARGDECK_INHERITED'))")
        assert _run(request).output().strip() == "yes"

    def test_inline_stdin(self) -> None:
        request = _python(
            "import sys; print(sys.stdin.read().upper())",
            stdin_source=InlineText("hello"),
        )
        assert _run(request).output().strip() == "HELLO"

    def test_file_stdin(self, tmp_path: Path) -> None:
        source = tmp_path / "in.txt"
        source.write_text("from file", encoding="utf-8")
        request = _python(
            "import sys; print(sys.stdin.read())",
            stdin_source=FileInput(str(source)),
        )
        assert _run(request).output().strip() == "from file"

    def test_no_stdin_reads_eof(self) -> None:
        request = _python("import sys; print(repr(sys.stdin.read()))")
        assert _run(request).output().strip() == "''"

    def test_working_directory(self, tmp_path: Path) -> None:
        request = _python("import os; print(os.getcwd())", working_directory=str(tmp_path))
        assert Path(_run(request).output().strip()).resolve() == tmp_path.resolve()


# ---------------------------------------------------------------------------
# Spawn failures
# ---------------------------------------------------------------------------

class TestSpawnFailures:
    def test_missing_executable(self) -> None:
        process = ChildProcess(ExecutionRequest(argv=("argdeck-no-such-program-xyz",)))
        with pytest.raises(SpawnError):
            process.start()
        assert process.status.state is ProcessState.SPAWN_FAILED
        assert process.status.error
        assert not process.is_running()

    def test_missing_stdin_file(self, tmp_path: Path) -> None:
        process = ChildProcess(_python("pass", stdin_source=FileInput(str(tmp_path / "nope.txt"))))
        with pytest.raises(SpawnError):
            process.start()
        assert process.status.state is ProcessState.SPAWN_FAILED

    def test_missing_working_directory(self, tmp_path: Path) -> None:
        process = ChildProcess(_python("pass", working_directory=str(tmp_path / "missing")))
        with pytest.raises(SpawnError):
            process.start()
        assert process.status.state is ProcessState.SPAWN_FAILED
