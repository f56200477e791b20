"""
EnvKeys hook: PATH and NIMBLE_DIR for an installed version.

NIMBLE_DIR priority:
1. An already-set NIMBLE_DIR is left alone
2. A nimbledeps/ directory in the working directory wins; NIMBLE_DIR stays
   unset so nimble picks the project-local directory itself
3. Otherwise packages go to <install>/nimble, isolated per Nim version
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from vfox_nim.core.filesystem import FileProbe
from vfox_nim.hooks.context import NIMBLE_DIR_ENV, EnvKeysRequest

logger = logging.getLogger(__name__)

PROJECT_PACKAGES_DIR = "nimbledeps"


def env_entries(
    request: EnvKeysRequest, probe: Optional[FileProbe] = None
) -> List[Dict[str, str]]:
    probe = probe or FileProbe()
    entries = [{"key": "PATH", "value": str(request.install_path / "bin")}]

    if request.nimble_dir:
        logger.debug(f"Keeping existing {NIMBLE_DIR_ENV}={request.nimble_dir}")
        return entries

    if request.cwd is not None and probe.exists(request.cwd / PROJECT_PACKAGES_DIR):
        logger.debug(f"Using project-local {PROJECT_PACKAGES_DIR}/ in {request.cwd}")
        return entries

    entries.append({"key": NIMBLE_DIR_ENV, "value": str(request.install_path / "nimble")})
    return entries


def env_keys(
    ctx: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
    probe: Optional[FileProbe] = None,
) -> List[Dict[str, str]]:
    """
    Environment for ctx['path'].

    Args:
        ctx: Host context
        environ: Environment to read NIMBLE_DIR and PWD from (default: os.environ)
        probe: File probe for the nimbledeps/ check

    Returns:
        [{'key': 'PATH', ...}] plus NIMBLE_DIR when it should be set
    """
    return env_entries(EnvKeysRequest.from_context(ctx, environ), probe)


__all__ = ["env_keys", "env_entries", "PROJECT_PACKAGES_DIR"]
