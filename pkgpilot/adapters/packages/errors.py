"""
Package manager errors.

Execution failures carry the spec that ran and the outcome it
produced, so callers can inspect stderr and the exit code.
"""

from __future__ import annotations

from pkgpilot.core.models.command import CommandSpec, ExecutionOutcome

# Tail of each captured stream kept in the error message
_MAX_STREAM_CHARS = 2000


class PackageManagerError(Exception):
    """Base class for every package-manager failure."""


class ExecutionError(PackageManagerError):
    """A package-manager command failed or could not be started."""

    def __init__(self, spec: CommandSpec, outcome: ExecutionOutcome):
        self.spec = spec
        self.outcome = outcome
        super().__init__(self._format())

    @property
    def stderr(self) -> str:
        return self.outcome.stderr.decode("utf-8", errors="replace")

    @property
    def stdout(self) -> str:
        return self.outcome.stdout.decode("utf-8", errors="replace")

    @property
    def exit_code(self) -> int | None:
        return self.outcome.exit_code

    def _format(self) -> str:
        msg = f"error running {self.spec}: {self.outcome.error}"
        stdout = self.stdout.strip()[-_MAX_STREAM_CHARS:]
        stderr = self.stderr.strip()[-_MAX_STREAM_CHARS:]
        if stdout:
            msg += f"\nstdout: {stdout}"
        if stderr:
            msg += f"\nstderr: {stderr}"
        return msg


class DatabaseLockedError(ExecutionError):
    """The dpkg database was interrupted and needs ``dpkg --configure -a``."""


class CommandCancelledError(ExecutionError):
    """The command was cancelled or hit its deadline."""


class RefreshError(ExecutionError):
    """``apt-get update`` failed; no update simulation was attempted."""


class RepairError(PackageManagerError):
    """The database repair command failed. Never retried."""

    def __init__(self, cause: ExecutionError):
        self.cause = cause
        super().__init__(f"dpkg database repair failed: {cause}")


class PackageInfoError(PackageManagerError):
    """Package metadata output could not be parsed."""
