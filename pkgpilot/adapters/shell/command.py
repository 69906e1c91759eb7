"""
Shell command runner — execute external programs and capture output.

This is the SINGLE PLACE where package-manager processes are spawned.
Adapters receive a CommandRunner through their constructor, so tests
swap in MockCommandRunner and never touch a real process.

Runners return ExecutionOutcome objects. They never raise for a
process that fails, times out, cannot be started, or is cancelled.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from abc import ABC, abstractmethod

from pkgpilot.core.models.command import CommandSpec, ExecutionOutcome

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while a process runs
_POLL_INTERVAL = 0.1

# Grace period between SIGTERM and SIGKILL
_TERMINATE_GRACE = 5.0


class CommandRunner(ABC):
    """Abstract executor contract."""

    @abstractmethod
    def run(
        self,
        spec: CommandSpec,
        cancel: threading.Event | None = None,
    ) -> ExecutionOutcome:
        """Run ``spec`` to completion and return its outcome.

        If ``cancel`` is set before or during execution the process is
        not started, or is terminated, and a cancelled outcome returns.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class SubprocessCommandRunner(CommandRunner):
    """Run commands with ``subprocess.Popen``.

    Args:
        timeout: Seconds before a running process is terminated.
        poll_interval: Seconds between cancellation checks.
    """

    def __init__(self, timeout: float = 600, poll_interval: float = _POLL_INTERVAL):
        self._timeout = timeout
        self._poll_interval = poll_interval

    @property
    def timeout(self) -> float:
        return self._timeout

    def run(
        self,
        spec: CommandSpec,
        cancel: threading.Event | None = None,
    ) -> ExecutionOutcome:
        if cancel is not None and cancel.is_set():
            logger.debug("Cancelled before start: %s", spec)
            return ExecutionOutcome.failure(error="cancelled before start", cancelled=True)

        logger.debug("Executing: %s", spec)
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                spec.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=spec.merged_env(),
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Cannot start %s: %s", spec.program, e)
            return ExecutionOutcome.failure(error=f"cannot start {spec.program}: {e}")

        deadline = start + self._timeout
        while True:
            try:
                stdout, stderr = proc.communicate(timeout=self._poll_interval)
                break
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    stdout, stderr = self._terminate(proc)
                    return ExecutionOutcome.failure(
                        error="cancelled",
                        stdout=stdout,
                        stderr=stderr,
                        exit_code=proc.returncode,
                        cancelled=True,
                        duration_ms=_elapsed_ms(start),
                    )
                if time.monotonic() >= deadline:
                    stdout, stderr = self._terminate(proc)
                    return ExecutionOutcome.failure(
                        error=f"timed out after {self._timeout}s",
                        stdout=stdout,
                        stderr=stderr,
                        exit_code=proc.returncode,
                        cancelled=True,
                        duration_ms=_elapsed_ms(start),
                    )

        elapsed_ms = _elapsed_ms(start)
        if proc.returncode == 0:
            return ExecutionOutcome.success(
                stdout=stdout,
                stderr=stderr,
                duration_ms=elapsed_ms,
            )

        logger.debug("%s exited with code %d", spec.program, proc.returncode)
        return ExecutionOutcome.failure(
            error=f"exit status {proc.returncode}",
            stdout=stdout,
            stderr=stderr,
            exit_code=proc.returncode,
            duration_ms=elapsed_ms,
        )

    @staticmethod
    def _terminate(proc: subprocess.Popen) -> tuple[bytes, bytes]:
        """Stop the process group and drain whatever it wrote.

        apt-get and dpkg spawn children that inherit the output pipes,
        so the whole session is signalled, not just the direct child.
        """
        _signal_group(proc, signal.SIGTERM)
        try:
            return proc.communicate(timeout=_TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            _signal_group(proc, signal.SIGKILL)
        try:
            return proc.communicate(timeout=_TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            # A descendant left the group and still holds the pipes
            logger.warning("Output pipes still open after killing pid %d", proc.pid)
            for stream in (proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()
            proc.wait()
            return b"", b""


def _signal_group(proc: subprocess.Popen, sig: signal.Signals) -> None:
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass  # group already gone


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
