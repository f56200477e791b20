"""
Post-install command: finish an installation extracted to PATH.
"""

import logging

from vfox_nim.cli.utils import build_services
from vfox_nim.hooks.post_install import post_install
from vfox_nim.metadata import PLUGIN_NAME

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the post-install command.

    Args:
        args: Parsed arguments with path and optional version

    Returns:
        Exit code (0 for success)
    """
    services = build_services(args)
    ctx = {"sdkInfo": {PLUGIN_NAME: {"path": str(args.path), "version": args.version}}}
    post_install(ctx, services)
    return 0
