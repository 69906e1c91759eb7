"""
Package manager base — the contract every backend implements.

Backends (apt today; yum, zypper and friends share this shape with
different command tables) drive an OS-level tool through an injected
CommandRunner and return PackageRecords. Unlike the runner, a backend
DOES raise: failures surface as PackageManagerError subclasses.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from pkgpilot.adapters.shell.command import CommandRunner
from pkgpilot.core.models.package import PackageRecord


class PackageManager(ABC):
    """Abstract base class for package-manager backends.

    To create a new backend:
        1. Subclass PackageManager
        2. Implement name, is_available, install, remove,
           installed_packages, updates
        3. Build its commands as CommandSpecs and run them through
           ``self.runner``
    """

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'apt')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool exists on this host. Never raises."""

    @abstractmethod
    def install(
        self,
        names: Sequence[str],
        cancel: threading.Event | None = None,
    ) -> None:
        """Install packages by name."""

    @abstractmethod
    def remove(
        self,
        names: Sequence[str],
        cancel: threading.Event | None = None,
    ) -> None:
        """Remove packages by name."""

    @abstractmethod
    def installed_packages(
        self,
        cancel: threading.Event | None = None,
    ) -> list[PackageRecord]:
        """List every installed package."""

    @abstractmethod
    def updates(
        self,
        include_new: bool = False,
        cancel: threading.Event | None = None,
    ) -> list[PackageRecord]:
        """List packages with a pending update."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
