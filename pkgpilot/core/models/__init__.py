"""
Domain models — Pydantic types for pkgpilot.

All models are re-exported here for convenient access:

    from pkgpilot.core.models import CommandSpec, PackageRecord, Settings
"""

from pkgpilot.core.models.command import CommandSpec, ExecutionOutcome
from pkgpilot.core.models.package import PackageRecord
from pkgpilot.core.models.settings import AptSettings, RunnerSettings, Settings

__all__ = [
    # settings.py
    "AptSettings",
    # command.py
    "CommandSpec",
    "ExecutionOutcome",
    # package.py
    "PackageRecord",
    "RunnerSettings",
    "Settings",
]
