"""
Settings model — tool paths and runner limits.

Loaded from pkgpilot.yml. Every field has a default that matches a
stock Debian/Ubuntu host, so an empty or absent file is valid.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

UpgradeType = Literal["upgrade", "dist-upgrade", "full-upgrade"]


class AptSettings(BaseModel):
    """Program paths and options for the apt backend."""

    apt_get: str = "/usr/bin/apt-get"
    dpkg: str = "/usr/bin/dpkg"
    dpkg_query: str = "/usr/bin/dpkg-query"
    dpkg_deb: str = "/usr/bin/dpkg-deb"
    upgrade_type: UpgradeType = "upgrade"
    env: dict[str, str] = Field(default_factory=dict)   # extra vars for install/remove


class RunnerSettings(BaseModel):
    """Limits applied to every external invocation."""

    timeout: float = Field(default=600, gt=0)


class Settings(BaseModel):
    """Root settings — loaded from pkgpilot.yml."""

    apt: AptSettings = Field(default_factory=AptSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
