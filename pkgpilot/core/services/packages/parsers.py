"""
Output parsers — dpkg/apt text output into PackageRecords.

Every parser is a two-stage pipeline:

    tokenize (line → structured tuple or None)  →  normalize → PackageRecord

Lines that do not tokenize are skipped silently. Garbled or partial
tool output never aborts a listing; it just yields fewer records.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from pkgpilot.core.models.package import PackageRecord
from pkgpilot.core.services.packages.arch import ARCH_UNKNOWN, normalize_arch

logger = logging.getLogger(__name__)


def _lines(data: bytes | None) -> list[str]:
    if not data:
        return []
    text = data.decode("utf-8", errors="replace")
    return [ln.strip() for ln in text.strip().splitlines()]


def _record(name: str, arch: str, version: str) -> PackageRecord:
    return PackageRecord(name=name, architecture=normalize_arch(arch), version=version)


# ── Installed packages (dpkg-query) ─────────────────────────────


def tokenize_installed_line(line: str) -> tuple[str, str, str] | None:
    """Split a ``name architecture version`` line.

    Returns None unless the line has exactly three fields.
    """
    fields = line.split()
    if len(fields) != 3:
        return None
    name, arch, version = fields
    return name, arch, version


def parse_installed(data: bytes | None) -> list[PackageRecord]:
    """Parse ``dpkg-query -W`` output into records, in input order."""
    pkgs: list[PackageRecord] = []
    for line in _lines(data):
        fields = tokenize_installed_line(line)
        if fields is None:
            logger.debug("Skipping unrecognized dpkg-query line: %r", line)
            continue
        pkgs.append(_record(*fields))
    return pkgs


# ── Pending updates (apt-get --just-print) ──────────────────────

# Inst libldap-common [2.4.45+dfsg-1ubuntu1.2] (2.4.45+dfsg-1ubuntu1.3 Ubuntu:18.04/bionic-updates [all])
# Inst firmware-linux-free (3.4 Debian:9.9/stable [all])
# Conf firmware-linux-free (3.4 Debian:9.9/stable [all])
_UPDATE_LINE_RE = re.compile(
    r"^(?P<kind>Inst|Conf)\s+(?P<name>\S+)"
    r"(?:\s+\[(?P<old>[^\]\s]+)\])?"
    r"\s+\((?P<group>[^)]*)\)"
)
_GROUP_ARCH_RE = re.compile(r"\[(?P<arch>[^\]\s]+)\]\s*$")


@dataclass(frozen=True)
class UpdateLine:
    """A tokenized ``Inst`` or ``Conf`` line from an apt simulation."""

    kind: str                   # "Inst" | "Conf"
    name: str
    new_version: str
    old_version: str | None = None
    arch: str | None = None     # raw token, None when not annotated

    @property
    def is_upgrade(self) -> bool:
        """An ``Inst`` line replacing an installed version."""
        return self.kind == "Inst" and self.old_version is not None


def tokenize_update_line(line: str) -> UpdateLine | None:
    """Recognise one simulation line, or return None."""
    m = _UPDATE_LINE_RE.match(line)
    if not m:
        return None

    group = m.group("group").split()
    if not group:
        return None

    arch_match = _GROUP_ARCH_RE.search(m.group("group"))
    return UpdateLine(
        kind=m.group("kind"),
        name=m.group("name"),
        new_version=group[0],
        old_version=m.group("old"),
        arch=arch_match.group("arch") if arch_match else None,
    )


def parse_updates(data: bytes | None, include_new: bool = False) -> list[PackageRecord]:
    """Parse ``apt-get --just-print`` output into pending-update records.

    Upgrades (``Inst`` with an old version) are always reported. With
    ``include_new``, packages the upgrade would newly install are
    reported as well: ``Inst`` lines without an old version, then
    ``Conf`` lines for any package not already listed.

    Output order: all ``Inst`` records as they appear, then ``Conf``.
    """
    inst: list[PackageRecord] = []
    conf: list[UpdateLine] = []

    for line in _lines(data):
        tok = tokenize_update_line(line)
        if tok is None:
            continue
        if tok.kind == "Conf":
            if include_new:
                conf.append(tok)
            continue
        if not tok.is_upgrade and not include_new:
            continue
        inst.append(_record(tok.name, tok.arch or ARCH_UNKNOWN, tok.new_version))

    seen = {p.name for p in inst}
    pkgs = inst
    for tok in conf:
        if tok.name in seen:
            continue
        seen.add(tok.name)
        pkgs.append(_record(tok.name, tok.arch or ARCH_UNKNOWN, tok.new_version))
    return pkgs


# ── Deb archive info (dpkg-deb -I) ──────────────────────────────

_CONTROL_FIELD_RE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9-]*):\s*(?P<value>.*)$")


def parse_deb_info(data: bytes | None) -> PackageRecord | None:
    """Extract name, architecture and version from ``dpkg-deb -I`` output.

    Returns None if any of the three control fields is missing.
    """
    fields: dict[str, str] = {}
    for line in _lines(data):
        m = _CONTROL_FIELD_RE.match(line)
        if m and m.group("key") in ("Package", "Architecture", "Version"):
            fields.setdefault(m.group("key"), m.group("value").strip())

    if not all(fields.get(k) for k in ("Package", "Architecture", "Version")):
        return None
    return _record(fields["Package"], fields["Architecture"], fields["Version"])
