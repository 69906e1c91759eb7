"""
Command and outcome models — the executor contract.

A CommandSpec describes one external invocation. An ExecutionOutcome
is what the executor hands back. Executors return outcomes, never
exceptions: the adapter decides what a failure means.
"""

from __future__ import annotations

import os
import shlex
from typing import Any

from pydantic import BaseModel, Field


class CommandSpec(BaseModel):
    """One external invocation.

    ``args`` order is significant and must match the target tool's CLI
    exactly. ``env`` holds overrides only; they are merged over the
    ambient process environment at execution time.
    """

    program: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def argv(self) -> list[str]:
        """Full argument vector for ``subprocess``."""
        return [self.program, *self.args]

    def merged_env(self) -> dict[str, str]:
        """Process environment with this spec's overrides applied."""
        env = os.environ.copy()
        env.update(self.env)
        return env

    def __str__(self) -> str:
        return shlex.join(self.argv)


class ExecutionOutcome(BaseModel):
    """Result of running a CommandSpec.

    ``error`` is the failure marker: ``None`` means the command ran and
    exited cleanly. Both streams are always captured, even on failure,
    so callers can classify what went wrong.
    """

    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int | None = None
    error: str | None = None
    cancelled: bool = False
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.error is None

    @classmethod
    def success(
        cls,
        stdout: bytes = b"",
        stderr: bytes = b"",
        **kwargs: Any,
    ) -> ExecutionOutcome:
        """Create a success outcome."""
        kwargs.setdefault("exit_code", 0)
        return cls(stdout=stdout, stderr=stderr, **kwargs)

    @classmethod
    def failure(
        cls,
        error: str,
        stdout: bytes = b"",
        stderr: bytes = b"",
        **kwargs: Any,
    ) -> ExecutionOutcome:
        """Create a failure outcome."""
        return cls(stdout=stdout, stderr=stderr, error=error, **kwargs)
