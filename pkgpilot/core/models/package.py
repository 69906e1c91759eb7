"""
Package record — one installed or updatable package.

Records are built by the output parsers only, after architecture
normalization. They are immutable and compare structurally.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PackageRecord(BaseModel):
    """A package as reported by the package manager."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    architecture: str      # canonical token, see normalize_arch()
    version: str           # opaque, never compared

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "architecture": self.architecture,
            "version": self.version,
        }

    def __str__(self) -> str:
        return f"{self.name} {self.architecture} {self.version}"
