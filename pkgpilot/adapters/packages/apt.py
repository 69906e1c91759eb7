"""
APT adapter — drive apt-get, dpkg and dpkg-query.

Install and remove recover from an interrupted dpkg database:

States:
    PRIMARY → Run the requested command.
    REPAIR  → Run ``dpkg --configure -a`` once.
    RETRY   → Run the requested command once more; its result is final.
    DONE    → Return the outcome.

Transitions:
    PRIMARY → DONE:    command succeeded
    PRIMARY → REPAIR:  command failed with the interrupted-database signature
    PRIMARY → (raise): any other failure, or cancellation
    REPAIR  → RETRY:   repair succeeded
    REPAIR  → (raise): repair failed (RepairError)
    RETRY   → DONE / (raise)

States only move forward, so there is at most one repair and one
retry per call. Listing operations are read-only and never repair.
"""

from __future__ import annotations

import logging
import re
import shutil
import threading
from collections.abc import Sequence
from enum import StrEnum
from os import PathLike

from pkgpilot.adapters.base import PackageManager
from pkgpilot.adapters.packages.errors import (
    CommandCancelledError,
    DatabaseLockedError,
    ExecutionError,
    PackageInfoError,
    RefreshError,
    RepairError,
)
from pkgpilot.adapters.shell.command import CommandRunner
from pkgpilot.core.models.command import CommandSpec, ExecutionOutcome
from pkgpilot.core.models.package import PackageRecord
from pkgpilot.core.models.settings import AptSettings
from pkgpilot.core.services.packages.parsers import (
    parse_deb_info,
    parse_installed,
    parse_updates,
)

logger = logging.getLogger(__name__)

# ── Command tables ──────────────────────────────────────────────

APT_GET_INSTALL_ARGS = ["install", "-y"]
APT_GET_REMOVE_ARGS = ["remove", "-y"]
APT_GET_UPDATE_ARGS = ["update"]
APT_GET_SIMULATE_ARGS = ["--just-print", "-qq"]
DPKG_REPAIR_ARGS = ["--configure", "-a"]
DPKG_INSTALL_ARGS = ["-i"]
DPKG_QUERY_ARGS = ["-W", "-f", "${Package} ${Architecture} ${Version}\n"]
DPKG_DEB_INFO_ARGS = ["-I"]

NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

# apt-get and dpkg print this when a previous run was interrupted:
#   E: dpkg was interrupted, you must manually run 'dpkg --configure -a' ...
_REPAIR_SIGNATURE = re.compile(rb"dpkg --configure -a|dpkg was interrupted")


class RecoveryState(StrEnum):
    """Repair-and-retry states for mutating commands."""

    PRIMARY = "primary"
    REPAIR = "repair"
    RETRY = "retry"
    DONE = "done"


def needs_repair(outcome: ExecutionOutcome) -> bool:
    """Whether a failed outcome is the interrupted-database failure."""
    if outcome.ok or outcome.cancelled:
        return False
    return _REPAIR_SIGNATURE.search(outcome.stderr) is not None


def _execution_error(
    spec: CommandSpec,
    outcome: ExecutionOutcome,
    default: type[ExecutionError] = ExecutionError,
) -> ExecutionError:
    if outcome.cancelled:
        return CommandCancelledError(spec, outcome)
    if default is ExecutionError and needs_repair(outcome):
        return DatabaseLockedError(spec, outcome)
    return default(spec, outcome)


class AptPackageManager(PackageManager):
    """Package manager backend for Debian/Ubuntu hosts.

    Args:
        runner: Executor used for every command.
        settings: Program paths and options (default: stock paths).
    """

    def __init__(self, runner: CommandRunner, settings: AptSettings | None = None):
        super().__init__(runner)
        self._settings = settings or AptSettings()

    @property
    def name(self) -> str:
        return "apt"

    @property
    def settings(self) -> AptSettings:
        return self._settings

    def is_available(self) -> bool:
        return shutil.which(self._settings.apt_get) is not None

    # ── Command builders ────────────────────────────────────────

    def _mutating_env(self) -> dict[str, str]:
        return {**NONINTERACTIVE_ENV, **self._settings.env}

    def install_command(self, names: Sequence[str]) -> CommandSpec:
        return CommandSpec(
            program=self._settings.apt_get,
            args=[*APT_GET_INSTALL_ARGS, *names],
            env=self._mutating_env(),
        )

    def remove_command(self, names: Sequence[str]) -> CommandSpec:
        return CommandSpec(
            program=self._settings.apt_get,
            args=[*APT_GET_REMOVE_ARGS, *names],
            env=self._mutating_env(),
        )

    def repair_command(self) -> CommandSpec:
        return CommandSpec(program=self._settings.dpkg, args=list(DPKG_REPAIR_ARGS))

    def install_deb_command(self, path: str | PathLike[str]) -> CommandSpec:
        return CommandSpec(
            program=self._settings.dpkg,
            args=[*DPKG_INSTALL_ARGS, str(path)],
            env=self._mutating_env(),
        )

    def query_command(self) -> CommandSpec:
        return CommandSpec(program=self._settings.dpkg_query, args=list(DPKG_QUERY_ARGS))

    def refresh_command(self) -> CommandSpec:
        return CommandSpec(program=self._settings.apt_get, args=list(APT_GET_UPDATE_ARGS))

    def simulate_command(self) -> CommandSpec:
        return CommandSpec(
            program=self._settings.apt_get,
            args=[*APT_GET_SIMULATE_ARGS, self._settings.upgrade_type],
        )

    def deb_info_command(self, path: str | PathLike[str]) -> CommandSpec:
        return CommandSpec(
            program=self._settings.dpkg_deb,
            args=[*DPKG_DEB_INFO_ARGS, str(path)],
        )

    # ── Execution ───────────────────────────────────────────────

    def _run(self, spec: CommandSpec, cancel: threading.Event | None) -> ExecutionOutcome:
        """Run once. Raise the classified error on failure."""
        outcome = self._runner.run(spec, cancel)
        if not outcome.ok:
            raise _execution_error(spec, outcome)
        return outcome

    def _run_with_repair(
        self,
        spec: CommandSpec,
        cancel: threading.Event | None,
    ) -> ExecutionOutcome:
        """Run a mutating command, repairing the dpkg database at most once."""
        state = RecoveryState.PRIMARY

        while True:
            if state is RecoveryState.PRIMARY:
                outcome = self._runner.run(spec, cancel)
                if outcome.ok:
                    return outcome
                elif needs_repair(outcome):
                    logger.warning(
                        "dpkg database needs repair, running %s", self.repair_command(),
                    )
                    state = RecoveryState.REPAIR
                else:
                    raise _execution_error(spec, outcome)

            elif state is RecoveryState.REPAIR:
                repair_spec = self.repair_command()
                repair = self._runner.run(repair_spec, cancel)
                if not repair.ok:
                    cause = _execution_error(repair_spec, repair)
                    raise RepairError(cause) from cause
                state = RecoveryState.RETRY

            elif state is RecoveryState.RETRY:
                logger.info("Retrying after repair: %s", spec)
                outcome = self._runner.run(spec, cancel)
                if not outcome.ok:
                    raise _execution_error(spec, outcome)
                return outcome

    # ── Operations ──────────────────────────────────────────────

    def install(
        self,
        names: Sequence[str],
        cancel: threading.Event | None = None,
    ) -> None:
        if not names:
            logger.debug("Nothing to install")
            return
        self._run_with_repair(self.install_command(names), cancel)
        logger.info("Installed %s", ", ".join(names))

    def remove(
        self,
        names: Sequence[str],
        cancel: threading.Event | None = None,
    ) -> None:
        if not names:
            logger.debug("Nothing to remove")
            return
        self._run_with_repair(self.remove_command(names), cancel)
        logger.info("Removed %s", ", ".join(names))

    def install_deb(
        self,
        path: str | PathLike[str],
        cancel: threading.Event | None = None,
    ) -> None:
        """Install a local ``.deb`` archive with ``dpkg -i``."""
        self._run_with_repair(self.install_deb_command(path), cancel)
        logger.info("Installed %s", path)

    def installed_packages(
        self,
        cancel: threading.Event | None = None,
    ) -> list[PackageRecord]:
        outcome = self._run(self.query_command(), cancel)
        pkgs = parse_installed(outcome.stdout)
        logger.info("Found %d installed packages", len(pkgs))
        return pkgs

    def updates(
        self,
        include_new: bool = False,
        cancel: threading.Event | None = None,
    ) -> list[PackageRecord]:
        """List pending updates.

        Refreshes package metadata first; if that fails the simulation
        never runs. The simulation's output is only parsed on success.
        """
        refresh_spec = self.refresh_command()
        refresh = self._runner.run(refresh_spec, cancel)
        if not refresh.ok:
            raise _execution_error(refresh_spec, refresh, default=RefreshError)

        outcome = self._run(self.simulate_command(), cancel)
        pkgs = parse_updates(outcome.stdout, include_new=include_new)
        logger.info("Found %d pending updates", len(pkgs))
        return pkgs

    def deb_package_info(
        self,
        path: str | PathLike[str],
        cancel: threading.Event | None = None,
    ) -> PackageRecord:
        """Read name, architecture and version from a ``.deb`` archive."""
        outcome = self._run(self.deb_info_command(path), cancel)
        pkg = parse_deb_info(outcome.stdout)
        if pkg is None:
            raise PackageInfoError(f"could not read package fields from {path}")
        return pkg
