"""
Architecture normalization.

dpkg and apt report Debian architecture names; callers compare
packages across tools using one canonical vocabulary.
"""

from __future__ import annotations

# Emitted when a tool line carries no architecture annotation at all.
ARCH_UNKNOWN = "unknown"

_ARCH_MAP: dict[str, str] = {
    "amd64": "x86_64",
    "64-bit": "x86_64",
    "i386": "x86_32",
    "i686": "x86_32",
    "32-bit": "x86_32",
    "noarch": "all",
}


def normalize_arch(token: str) -> str:
    """Map a tool-native architecture token to its canonical name.

    Unknown tokens pass through unchanged.
    """
    return _ARCH_MAP.get(token, token)
