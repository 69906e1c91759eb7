"""pkgpilot — drive the APT/dpkg tool family from Python."""

__version__ = "0.1.0"
