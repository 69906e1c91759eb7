"""
Mock command runner — test double for every package-manager operation.

Simulates tool behavior without spawning processes. Outcomes can be
scripted in order; anything unscripted succeeds with the default
output.
"""

from __future__ import annotations

import threading
from collections import deque

from pkgpilot.adapters.shell.command import CommandRunner
from pkgpilot.core.models.command import CommandSpec, ExecutionOutcome


class MockCommandRunner(CommandRunner):
    """Scriptable CommandRunner for testing.

    By default, every command succeeds with ``default_stdout``. Queue
    outcomes with ``push`` to control what successive calls return.
    """

    def __init__(self, default_stdout: bytes = b""):
        self._default_stdout = default_stdout
        self._scripted: deque[ExecutionOutcome] = deque()
        self._call_log: list[CommandSpec] = []
        self._cancel_log: list[threading.Event | None] = []

    @property
    def call_log(self) -> list[CommandSpec]:
        """Every spec this mock has received, in order."""
        return self._call_log

    @property
    def cancel_log(self) -> list[threading.Event | None]:
        """The cancel token passed with each call."""
        return self._cancel_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def pending(self) -> int:
        """Scripted outcomes not yet consumed."""
        return len(self._scripted)

    def push(self, outcome: ExecutionOutcome) -> None:
        """Queue the outcome for the next unanswered call."""
        self._scripted.append(outcome)

    def push_success(self, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.push(ExecutionOutcome.success(stdout=stdout, stderr=stderr))

    def push_failure(
        self,
        stderr: bytes = b"",
        stdout: bytes = b"",
        exit_code: int = 100,
    ) -> None:
        self.push(ExecutionOutcome.failure(
            error=f"exit status {exit_code}",
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
        ))

    def run(
        self,
        spec: CommandSpec,
        cancel: threading.Event | None = None,
    ) -> ExecutionOutcome:
        self._call_log.append(spec)
        self._cancel_log.append(cancel)

        if self._scripted:
            return self._scripted.popleft()

        return ExecutionOutcome.success(stdout=self._default_stdout)

    def reset(self) -> None:
        """Clear call log and scripted outcomes."""
        self._call_log.clear()
        self._cancel_log.clear()
        self._scripted.clear()
