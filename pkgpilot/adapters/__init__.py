"""
Adapters — everything that touches an external tool.

The CLI and callers only talk to PackageManager backends; backends
only talk to the host through a CommandRunner.
"""
