"""
Package manager backends — re-exports.

    from pkgpilot.adapters.packages import AptPackageManager, PackageManagerError
"""

from pkgpilot.adapters.packages.apt import (  # noqa: F401
    AptPackageManager,
    RecoveryState,
    needs_repair,
)
from pkgpilot.adapters.packages.errors import (  # noqa: F401
    CommandCancelledError,
    DatabaseLockedError,
    ExecutionError,
    PackageInfoError,
    PackageManagerError,
    RefreshError,
    RepairError,
)
