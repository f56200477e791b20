"""
Configuration for vfox-nim: install strategy and plugin settings.
"""

from vfox_nim.config.settings import (
    INSTALL_METHOD_ENV,
    VALID_INSTALL_METHODS,
    InstallStrategy,
    Settings,
    load_settings,
    resolve_install_strategy,
)

__all__ = [
    "INSTALL_METHOD_ENV",
    "VALID_INSTALL_METHODS",
    "InstallStrategy",
    "Settings",
    "load_settings",
    "resolve_install_strategy",
]
