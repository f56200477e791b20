"""
Resolve command: run PreInstall for a version and print the result.
"""

import logging

from vfox_nim.cli.utils import build_services, print_json, runtime_from_args
from vfox_nim.hooks.pre_install import pre_install

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed arguments with version, os, arch, install_method

    Returns:
        Exit code (0 for success)
    """
    services = build_services(args)
    result = pre_install({"version": args.version}, services, runtime_from_args(args))
    print_json(result)
    return 0
