"""
Tests for the vfox-nim command-line interface.
"""

import json
import logging
from argparse import Namespace
from unittest.mock import patch

import pytest

from vfox_nim.cli.parser import CLI
from vfox_nim.cli.utils import load_cli_settings, runtime_from_args
from vfox_nim.config.settings import InstallStrategy
from vfox_nim.core.platform import Platform
from vfox_nim.hooks.available import NIM_TAGS_API

OFFICIAL_LINUX = "https://nim-lang.org/download/nim-2.2.4-linux_x64.tar.xz"


@pytest.fixture
def cli():
    return CLI()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv("VFOX_NIM_INSTALL_METHOD", raising=False)
    monkeypatch.setenv("VFOX_NIM_CONFIG", str(tmp_path / "absent.yaml"))
    yield
    logging.basicConfig(level=logging.WARNING, force=True)


class TestParser:
    """Test argument parsing."""

    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage: vfox-nim" in capsys.readouterr().out

    def test_version(self, cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.run(["--version"])

        assert exc_info.value.code == 0
        assert "vfox-nim" in capsys.readouterr().out

    def test_resolve_arguments(self, cli):
        args = cli.parse_args(
            ["resolve", "2.2.4", "--os", "darwin", "--arch", "arm64", "--install-method", "binary"]
        )

        assert args.command == "resolve"
        assert args.version == "2.2.4"
        assert args.os == "darwin"
        assert args.arch == "arm64"
        assert args.install_method == "binary"

    def test_verbose_configures_debug_logging(self, cli):
        cli.run(["-v", "mise-env"])
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet_configures_error_logging(self, cli):
        cli.run(["-q", "mise-env"])
        assert logging.getLogger().level == logging.ERROR


class TestCommands:
    """Test command dispatch end to end with fake collaborators."""

    def test_mise_env(self, cli, capsys):
        assert cli.run(["mise-env", "--install-method", "binary"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output == [{"key": "VFOX_NIM_INSTALL_METHOD", "value": "binary"}]

    def test_mise_env_invalid_exits_1(self, cli, capsys):
        assert cli.run(["mise-env", "--install-method", "bogus"]) == 1
        assert "Invalid install_method 'bogus'" in capsys.readouterr().err

    def test_resolve(self, cli, capsys, make_services, fake_http):
        fake_http.existing.add(OFFICIAL_LINUX)

        with patch("vfox_nim.cli.commands.resolve.build_services", return_value=make_services()):
            code = cli.run(["resolve", "2.2.4", "--os", "linux", "--arch", "x86_64"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["url"] == OFFICIAL_LINUX

    def test_resolve_failure_exits_1(self, cli, make_services):
        services = make_services(InstallStrategy.BINARY)

        with patch("vfox_nim.cli.commands.resolve.build_services", return_value=services):
            code = cli.run(["resolve", "2.2.4", "--os", "darwin", "--arch", "arm64"])

        assert code == 1

    def test_available(self, cli, capsys, make_services, fake_http):
        fake_http.json[NIM_TAGS_API] = [{"name": "v2.2.4"}, {"name": "v2.2.2"}]

        with patch("vfox_nim.cli.commands.available.build_services", return_value=make_services()):
            assert cli.run(["available"]) == 0

        assert capsys.readouterr().out.split() == ["2.2.4", "2.2.2"]

    def test_env(self, cli, capsys, monkeypatch, tmp_path):
        monkeypatch.delenv("NIMBLE_DIR", raising=False)
        monkeypatch.setenv("PWD", str(tmp_path))
        install = tmp_path / "nim" / "2.2.4"

        assert cli.run(["env", str(install)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output == [
            {"key": "PATH", "value": str(install / "bin")},
            {"key": "NIMBLE_DIR", "value": str(install / "nimble")},
        ]

    def test_post_install(self, cli, make_services, fake_executor, tmp_path):
        install = tmp_path / "nim"
        (install / "bin").mkdir(parents=True)
        (install / "bin" / "nim").write_text("")
        fake_executor.on("--version", stdout="Nim Compiler Version 2.2.4\n")

        with patch("vfox_nim.cli.commands.post_install.build_services", return_value=make_services()), patch(
            "vfox_nim.hooks.context.detect_platform", return_value=Platform("linux", "x86_64")
        ):
            assert cli.run(["post-install", str(install), "--version", "2.2.4"]) == 0

        assert fake_executor.ran("--version")


class TestUtils:
    def test_install_method_flag_overrides_env(self, monkeypatch):
        monkeypatch.setenv("VFOX_NIM_INSTALL_METHOD", "source")
        args = Namespace(config=None, install_method="binary")

        assert load_cli_settings(args).install_strategy is InstallStrategy.BINARY

    def test_env_used_without_flag(self, monkeypatch):
        monkeypatch.setenv("VFOX_NIM_INSTALL_METHOD", "source")
        args = Namespace(config=None, install_method=None)

        assert load_cli_settings(args).install_strategy is InstallStrategy.SOURCE

    def test_runtime_from_args(self):
        assert runtime_from_args(Namespace(os=None, arch=None)) is None

        with patch("vfox_nim.cli.utils.detect_platform", return_value=Platform("linux", "x86_64")):
            runtime = runtime_from_args(Namespace(os="darwin", arch=None))

        assert runtime == {"osType": "darwin", "archType": "x86_64"}
