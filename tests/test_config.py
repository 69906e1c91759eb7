"""
Tests for configuration loading — pkgpilot.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from pkgpilot.core.config.loader import ConfigError, find_settings_file, load_settings


@pytest.fixture
def valid_settings_yml(tmp_path: Path) -> Path:
    """Create a valid pkgpilot.yml in a temp directory."""
    content = textwrap.dedent("""\
        apt:
          apt_get: /opt/apt/bin/apt-get
          upgrade_type: dist-upgrade
          env:
            APT_LISTCHANGES_FRONTEND: none
        runner:
          timeout: 120
    """)
    path = tmp_path / "pkgpilot.yml"
    path.write_text(content)
    return path


class TestFindSettingsFile:
    def test_in_start_dir(self, valid_settings_yml: Path):
        assert find_settings_file(valid_settings_yml.parent) == valid_settings_yml.resolve()

    def test_walks_up(self, valid_settings_yml: Path):
        nested = valid_settings_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_settings_file(nested) == valid_settings_yml.resolve()

    def test_not_found(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert find_settings_file(empty) is None


class TestLoadSettings:
    def test_valid(self, valid_settings_yml: Path):
        s = load_settings(valid_settings_yml)
        assert s.apt.apt_get == "/opt/apt/bin/apt-get"
        assert s.apt.upgrade_type == "dist-upgrade"
        assert s.apt.env == {"APT_LISTCHANGES_FRONTEND": "none"}
        assert s.apt.dpkg == "/usr/bin/dpkg"
        assert s.runner.timeout == 120

    def test_wrapped(self, tmp_path: Path):
        path = tmp_path / "pkgpilot.yml"
        path.write_text("pkgpilot:\n  apt:\n    dpkg: /sbin/dpkg\n")
        assert load_settings(path).apt.dpkg == "/sbin/dpkg"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "pkgpilot.yml"
        path.write_text("")
        assert load_settings(path).apt.apt_get == "/usr/bin/apt-get"

    def test_no_file_gives_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_settings().apt.upgrade_type == "upgrade"

    def test_discovered_from_cwd(self, valid_settings_yml: Path, monkeypatch):
        monkeypatch.chdir(valid_settings_yml.parent)
        assert load_settings().runner.timeout == 120

    def test_explicit_missing(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "pkgpilot.yml"
        path.write_text("apt: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "pkgpilot.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_settings(path)

    def test_schema_violation(self, tmp_path: Path):
        path = tmp_path / "pkgpilot.yml"
        path.write_text("apt:\n  upgrade_type: sideways\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path)
