"""
Plugin metadata as advertised to the host runtime.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from vfox_nim import __version__

logger = logging.getLogger(__name__)

PLUGIN_NAME = "nim"
LEGACY_VERSION_FILE = ".nim-version"

PLUGIN = {
    "name": PLUGIN_NAME,
    "version": __version__,
    "description": "Nim compiler version manager with Windows support (vfox/mise tool plugin)",
    "updateUrl": "https://github.com/elijahr/vfox-nim",
    "minRuntimeVersion": "0.2.0",
    "legacyFilenames": [LEGACY_VERSION_FILE],
    "notes": [
        "Supports Linux, macOS, and Windows",
        "Uses 4-level fallback: official binaries -> exact nightly -> generic nightly -> source",
        "Set GITHUB_TOKEN for higher API rate limits",
    ],
}


def parse_legacy_file(path: Union[str, Path]) -> Optional[str]:
    """
    Read the version pinned in a .nim-version file.

    Args:
        path: Path to the legacy version file

    Returns:
        First non-empty line, stripped, or None if the file is empty or
        unreadable

    Example:
        >>> parse_legacy_file(".nim-version")
        '2.2.4'
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        return None

    for line in content.splitlines():
        version = line.strip()
        if version:
            return version
    return None


__all__ = ["PLUGIN", "PLUGIN_NAME", "LEGACY_VERSION_FILE", "parse_legacy_file"]
