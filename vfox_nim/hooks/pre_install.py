"""
PreInstall hook: the resolution engine's entry point.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from vfox_nim.hooks.context import PluginServices, PreInstallRequest
from vfox_nim.toolchain.resolver import ResolutionEngine, ResolutionRequest

logger = logging.getLogger(__name__)


def pre_install(
    ctx: Mapping[str, Any],
    services: Optional[PluginServices] = None,
    runtime: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Resolve the download for ctx['version'].

    Args:
        ctx: Host context
        services: Collaborators (default: built from load_settings())
        runtime: Host RUNTIME table with osType/archType

    Returns:
        {'version', 'url', 'note'}

    Raises:
        UnsupportedVersionError: For unclassifiable versions
        NoPrebuiltBinaryError: If install_method='binary' finds no binary
    """
    services = services or PluginServices.from_settings()
    request = PreInstallRequest.from_context(ctx, services.settings, runtime)

    engine = ResolutionEngine(services.locator())
    artifact = engine.resolve(
        ResolutionRequest(request.version, request.platform, request.strategy)
    )
    return artifact.to_dict()


__all__ = ["pre_install"]
