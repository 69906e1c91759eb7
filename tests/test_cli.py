"""
Tests for CLI commands — global options, status, and the packages group.

A MockCommandRunner is injected through the click context object.
"""

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from pkgpilot.adapters.mock import MockCommandRunner
from pkgpilot.adapters.shell.command import SubprocessCommandRunner
from pkgpilot.main import cli
from pkgpilot.ui.cli.packages import build_manager

DPKG_ERR = b"E: dpkg was interrupted, you must manually run 'dpkg --configure -a'"


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    """Keep config discovery away from any real pkgpilot.yml."""
    monkeypatch.chdir(tmp_path)


def _invoke(mock: MockCommandRunner, *args: str):
    return CliRunner().invoke(cli, list(args), obj={"runner": mock})


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "pkgpilot" in result.output
        assert "packages" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestStatusCommand:
    def test_human(self):
        result = _invoke(MockCommandRunner(), "status")
        assert result.exit_code == 0
        assert "apt" in result.output
        assert "/usr/bin/dpkg-query" in result.output

    def test_json_uses_config(self, tmp_path: Path):
        config = tmp_path / "custom.yml"
        config.write_text("apt:\n  upgrade_type: full-upgrade\n")
        result = _invoke(MockCommandRunner(), "--config", str(config), "status", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["backend"] == "apt"
        assert data["settings"]["upgrade_type"] == "full-upgrade"

    def test_missing_config(self, tmp_path: Path):
        result = _invoke(MockCommandRunner(), "--config", str(tmp_path / "nope.yml"), "status")
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestBuildManager:
    def test_injected_runner_used(self):
        mock = MockCommandRunner()
        ctx = click.Context(cli, obj={"runner": mock, "config_path": None})
        manager = build_manager(ctx)
        assert manager.runner is mock

    def test_subprocess_runner_takes_configured_timeout(self, tmp_path: Path):
        config = tmp_path / "pkgpilot.yml"
        config.write_text("runner:\n  timeout: 120\n")
        ctx = click.Context(cli, obj={"config_path": config})
        manager = build_manager(ctx)
        assert isinstance(manager.runner, SubprocessCommandRunner)
        assert manager.runner.timeout == 120


class TestInstalledCommand:
    def test_json(self):
        mock = MockCommandRunner()
        mock.push_success(b"foo amd64 1.2.3-4\nbar noarch 2.0\n")
        result = _invoke(mock, "packages", "installed", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {"name": "foo", "architecture": "x86_64", "version": "1.2.3-4"},
            {"name": "bar", "architecture": "all", "version": "2.0"},
        ]

    def test_human(self):
        mock = MockCommandRunner()
        mock.push_success(b"foo amd64 1.2.3-4\n")
        result = _invoke(mock, "packages", "installed")
        assert result.exit_code == 0
        assert "Installed (1)" in result.output
        assert "foo" in result.output

    def test_failure(self):
        mock = MockCommandRunner()
        mock.push_failure(stderr=b"dpkg-query: no packages found")
        result = _invoke(mock, "packages", "installed")
        assert result.exit_code == 1
        assert "no packages found" in result.output


class TestUpdatesCommand:
    def test_up_to_date(self):
        mock = MockCommandRunner()
        result = _invoke(mock, "packages", "updates")
        assert result.exit_code == 0
        assert "up to date" in result.output
        assert mock.call_count == 2

    def test_include_new_json(self):
        mock = MockCommandRunner()
        mock.push_success()
        mock.push_success(
            b"Inst foo [1.0] (1.1 Debian:stable [amd64])\n"
            b"Conf bar (2.0 Debian:stable [all])\n"
        )
        result = _invoke(mock, "packages", "updates", "--include-new", "--json")
        assert result.exit_code == 0
        assert [p["name"] for p in json.loads(result.output)] == ["foo", "bar"]

    def test_refresh_failure(self):
        mock = MockCommandRunner()
        mock.push_failure(stderr=b"E: Could not get lock /var/lib/apt/lists/lock")
        result = _invoke(mock, "packages", "updates")
        assert result.exit_code == 1
        assert mock.call_count == 1


class TestInstallRemoveCommands:
    def test_install(self):
        mock = MockCommandRunner()
        result = _invoke(mock, "packages", "install", "curl", "jq")
        assert result.exit_code == 0
        assert "Installed: curl, jq" in result.output
        assert mock.call_log[0].args == ["install", "-y", "curl", "jq"]

    def test_install_recovers(self):
        mock = MockCommandRunner()
        mock.push_failure(stderr=DPKG_ERR)
        result = _invoke(mock, "packages", "install", "curl")
        assert result.exit_code == 0
        assert [c.program for c in mock.call_log] == [
            "/usr/bin/apt-get", "/usr/bin/dpkg", "/usr/bin/apt-get",
        ]

    def test_install_requires_names(self):
        result = _invoke(MockCommandRunner(), "packages", "install")
        assert result.exit_code != 0

    def test_remove_failure(self):
        mock = MockCommandRunner()
        mock.push_failure(stderr=b"E: Unable to locate package nope")
        result = _invoke(mock, "packages", "remove", "nope")
        assert result.exit_code == 1
        assert "Unable to locate package" in result.output


class TestDebCommands:
    def test_info(self, tmp_path: Path):
        deb = tmp_path / "foo.deb"
        deb.write_bytes(b"!<arch>\n")
        mock = MockCommandRunner()
        mock.push_success(b" Package: foo\n Version: 1.0\n Architecture: amd64\n")
        result = _invoke(mock, "packages", "info", str(deb))
        assert result.exit_code == 0
        assert "foo x86_64 1.0" in result.output

    def test_install_deb(self, tmp_path: Path):
        deb = tmp_path / "foo.deb"
        deb.write_bytes(b"!<arch>\n")
        mock = MockCommandRunner()
        result = _invoke(mock, "packages", "install-deb", str(deb))
        assert result.exit_code == 0
        assert mock.call_log[0].argv == ["/usr/bin/dpkg", "-i", str(deb)]
