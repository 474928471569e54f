"""
blisbuild CLI argument parser.

This module implements the command-line interface for blisbuild using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from blisbuild import __version__
from blisbuild.cli.utils import parse_env_assignment

logger = logging.getLogger(__name__)

COMMANDS = {
    "build": "blisbuild.cli.commands.build",
    "bindings": "blisbuild.cli.commands.bindings",
    "show-config": "blisbuild.cli.commands.show_config",
}


class CLI:
    """blisbuild command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="blisbuild",
            description="blisbuild - build vendored BLIS and generate its bindings",
            epilog='Use "blisbuild COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"blisbuild {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./blisbuild.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_build_command(subparsers)
        self._add_bindings_command(subparsers)
        self._add_show_config_command(subparsers)

        return parser

    def _add_env_argument(self, parser):
        parser.add_argument(
            "--env",
            action="append",
            type=parse_env_assignment,
            metavar="KEY=VALUE",
            help="Environment variables to set (can be used multiple times)",
        )

    def _add_build_command(self, subparsers):
        """Add 'build' subcommand."""
        parser = subparsers.add_parser(
            "build",
            help="Build BLIS if needed and generate bindings",
            description=(
                "Build the vendored BLIS tree unless it is already installed, "
                "announce link directives and regenerate the bindings module"
            ),
        )
        self._add_env_argument(parser)
        parser.add_argument(
            "--manifest",
            type=Path,
            metavar="PATH",
            help="Also write the announced directives to a JSON file",
        )

    def _add_bindings_command(self, subparsers):
        """Add 'bindings' subcommand."""
        parser = subparsers.add_parser(
            "bindings",
            help="Regenerate bindings from the installed header",
            description="Regenerate the bindings module from the installed BLIS header",
        )
        self._add_env_argument(parser)
        parser.add_argument(
            "--output",
            type=Path,
            metavar="PATH",
            help="Bindings module to write (default: OUT_DIR/bindings.py)",
        )

    def _add_show_config_command(self, subparsers):
        """Add 'show-config' subcommand."""
        parser = subparsers.add_parser(
            "show-config",
            help="Show the resolved build configuration",
            description="Print the build configuration and configure arguments",
        )
        self._add_env_argument(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        module_name = COMMANDS.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
