"""
Package output services — pure parsing and normalization.

Nothing here spawns processes; the adapters feed captured stdout in::

    from pkgpilot.core.services.packages import parse_installed
"""

from pkgpilot.core.services.packages.arch import (  # noqa: F401
    ARCH_UNKNOWN,
    normalize_arch,
)
from pkgpilot.core.services.packages.parsers import (  # noqa: F401
    UpdateLine,
    parse_deb_info,
    parse_installed,
    parse_updates,
    tokenize_installed_line,
    tokenize_update_line,
)
