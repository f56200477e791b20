"""
Available command: list installable Nim releases.
"""

import logging

from vfox_nim.cli.utils import build_services
from vfox_nim.hooks.available import available

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Print one version per line, in the order the tags API returns them.

    Returns:
        Exit code (0 even when the listing is empty)
    """
    versions = available({}, build_services(args))
    for entry in versions:
        print(entry["version"])
    if not versions:
        logger.warning("No versions found")
    return 0
