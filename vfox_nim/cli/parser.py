"""
vfox-nim CLI argument parser.

Drives the plugin hooks from a shell, without a vfox or mise host.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from vfox_nim import __version__
from vfox_nim.config.settings import VALID_INSTALL_METHODS
from vfox_nim.core.exceptions import VfoxNimError

logger = logging.getLogger(__name__)

COMMAND_MODULES = {
    "available": "vfox_nim.cli.commands.available",
    "resolve": "vfox_nim.cli.commands.resolve",
    "post-install": "vfox_nim.cli.commands.post_install",
    "env": "vfox_nim.cli.commands.env",
    "mise-env": "vfox_nim.cli.commands.mise_env",
}


class CLI:
    """vfox-nim command-line interface."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="vfox-nim",
            description="vfox-nim - Nim toolchain resolver and installer",
            epilog='Use "vfox-nim COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"vfox-nim {__version__}"
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
            help="Path to configuration file (default: ~/.config/vfox-nim/config.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_available_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_post_install_command(subparsers)
        self._add_env_command(subparsers)
        self._add_mise_env_command(subparsers)

        return parser

    @staticmethod
    def _add_install_method_option(parser):
        parser.add_argument(
            "--install-method",
            metavar="METHOD",
            help=f"Install strategy ({', '.join(VALID_INSTALL_METHODS)})",
        )

    def _add_available_command(self, subparsers):
        """Add 'available' subcommand."""
        subparsers.add_parser(
            "available",
            help="List installable Nim versions",
            description="List stable Nim releases from the nim-lang/Nim tags",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Resolve the download URL for a version",
            description="Run the PreInstall resolution for VERSION and print {version, url, note}",
        )
        parser.add_argument("version", metavar="VERSION", help="e.g. 2.2.4 or ref:devel")
        parser.add_argument("--os", metavar="OS", help="Target OS (default: host)")
        parser.add_argument("--arch", metavar="ARCH", help="Target architecture (default: host)")
        self._add_install_method_option(parser)

    def _add_post_install_command(self, subparsers):
        """Add 'post-install' subcommand."""
        parser = subparsers.add_parser(
            "post-install",
            help="Finish an extracted installation",
            description="Restructure, build from source if needed, and verify PATH",
        )
        parser.add_argument("path", type=Path, metavar="PATH", help="Installation root")
        parser.add_argument("--version", dest="version", metavar="VERSION", help="Installed version")
        self._add_install_method_option(parser)

    def _add_env_command(self, subparsers):
        """Add 'env' subcommand."""
        parser = subparsers.add_parser(
            "env",
            help="Print environment entries for an installation",
            description="Print PATH and NIMBLE_DIR entries for PATH",
        )
        parser.add_argument("path", type=Path, metavar="PATH", help="Installation root")

    def _add_mise_env_command(self, subparsers):
        """Add 'mise-env' subcommand."""
        parser = subparsers.add_parser(
            "mise-env",
            help="Validate install_method and print the exported variable",
        )
        self._add_install_method_option(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, 1 for plugin errors)
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
            return 130
        except VfoxNimError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

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
            force=True,
        )

    def _dispatch_command(self, args) -> int:
        module_name = COMMAND_MODULES.get(args.command)
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
