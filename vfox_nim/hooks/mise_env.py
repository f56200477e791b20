"""
MiseEnv hook: exports the install_method option for the install hooks.
"""

from typing import Any, Dict, List, Mapping

from vfox_nim.config.settings import INSTALL_METHOD_ENV, InstallStrategy
from vfox_nim.hooks.context import MiseEnvRequest


def mise_env(ctx: Mapping[str, Any]) -> List[Dict[str, str]]:
    """
    Map options.install_method to VFOX_NIM_INSTALL_METHOD.

    Raises:
        InvalidInstallMethodError: If the option is not auto, binary or source
    """
    request = MiseEnvRequest.from_context(ctx)
    strategy = InstallStrategy.parse(request.install_method)
    return [{"key": INSTALL_METHOD_ENV, "value": strategy.value}]


__all__ = ["mise_env"]
