from pkgpilot.adapters.shell.command import (  # noqa: F401
    CommandRunner,
    SubprocessCommandRunner,
)
