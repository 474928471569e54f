"""
Tests for CLI argument parser.
"""

import logging

import pytest
from pathlib import Path
from unittest.mock import patch

from blisbuild.cli.parser import CLI


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_creation(self):
        """Test CLI can be created."""
        cli = CLI()
        assert cli is not None
        assert cli.parser is not None

    def test_no_command_shows_help(self, capsys):
        """Test that running without command shows help."""
        cli = CLI()
        result = cli.run([])

        assert result == 1
        captured = capsys.readouterr()
        assert "usage:" in captured.out.lower() or "usage:" in captured.err.lower()

    def test_version_flag(self, capsys):
        """Test --version flag."""
        cli = CLI()

        with pytest.raises(SystemExit) as exc_info:
            cli.run(["--version"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "blisbuild" in captured.out


class TestBuildCommand:
    """Test build command parsing."""

    def test_build_basic(self):
        args = CLI().parse_args(["build"])

        assert args.command == "build"
        assert args.env is None
        assert args.manifest is None

    def test_build_with_env(self):
        """Test --env can be repeated."""
        args = CLI().parse_args(
            [
                "build",
                "--env",
                "BLIS_TARGET_ARCH=x86_64",
                "--env",
                "TARGET_CFLAGS=-O2 -g",
            ]
        )

        assert args.env == [
            ["BLIS_TARGET_ARCH", "x86_64"],
            ["TARGET_CFLAGS", "-O2 -g"],
        ]

    def test_build_env_value_may_contain_equals(self):
        args = CLI().parse_args(["build", "--env", "TARGET_LDFLAGS=-Wl,-rpath=/opt"])

        assert args.env == [["TARGET_LDFLAGS", "-Wl,-rpath=/opt"]]

    def test_build_invalid_env(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLI().parse_args(["build", "--env", "NOVALUE"])

        assert exc_info.value.code == 2

    def test_build_manifest(self):
        args = CLI().parse_args(["build", "--manifest", "link.json"])

        assert args.manifest == Path("link.json")


class TestOtherCommands:
    """Test bindings and show-config parsing."""

    def test_bindings_output(self):
        args = CLI().parse_args(["bindings", "--output", "gen/blis.py"])

        assert args.command == "bindings"
        assert args.output == Path("gen/blis.py")

    def test_show_config(self):
        args = CLI().parse_args(["show-config", "--env", "BLIS_CONFNAME=skx"])

        assert args.command == "show-config"
        assert args.env == [["BLIS_CONFNAME", "skx"]]


class TestGlobalOptions:
    """Test global options."""

    def test_defaults(self):
        args = CLI().parse_args(["build"])

        assert args.verbose is False
        assert args.quiet is False
        assert args.config is None
        assert isinstance(args.project_root, Path)

    def test_config_and_project_root(self, tmp_path):
        args = CLI().parse_args(
            ["--config", "ci.yaml", "--project-root", str(tmp_path), "build"]
        )

        assert args.config == Path("ci.yaml")
        assert args.project_root == tmp_path


class TestDispatch:
    """Test command dispatch."""

    def test_dispatches_to_command_module(self):
        with patch("blisbuild.cli.commands.show_config.run", return_value=0) as run:
            result = CLI().run(["show-config"])

        assert result == 0
        run.assert_called_once()
        assert run.call_args.args[0].command == "show-config"

    def test_keyboard_interrupt(self):
        with patch(
            "blisbuild.cli.commands.build.run", side_effect=KeyboardInterrupt()
        ):
            assert CLI().run(["build"]) == 130

    @pytest.mark.parametrize(
        "flags,level",
        [([], logging.INFO), (["-v"], logging.DEBUG), (["-q"], logging.ERROR)],
    )
    def test_logging_level(self, flags, level):
        with patch("blisbuild.cli.commands.build.run", return_value=0):
            CLI().run(flags + ["build"])

        assert logging.getLogger().level == level
