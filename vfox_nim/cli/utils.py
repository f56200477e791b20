"""
Shared utilities for CLI commands.
"""

import json
import logging
from dataclasses import replace
from typing import Any, Dict, Optional

from vfox_nim.config.settings import InstallStrategy, Settings, load_settings
from vfox_nim.core.platform import detect_platform
from vfox_nim.hooks.context import PluginServices

logger = logging.getLogger(__name__)


def load_cli_settings(args) -> Settings:
    """
    Settings for a CLI invocation.

    --install-method, where the command has it, overrides the config file
    and VFOX_NIM_INSTALL_METHOD.
    """
    settings = load_settings(config_file=getattr(args, "config", None))

    install_method = getattr(args, "install_method", None)
    if install_method:
        strategy = InstallStrategy.parse(install_method)
        settings = replace(settings, install_strategy=strategy)
    return settings


def build_services(args) -> PluginServices:
    return PluginServices.from_settings(load_cli_settings(args))


def runtime_from_args(args) -> Optional[Dict[str, str]]:
    """RUNTIME-style table from --os/--arch, filling gaps from the host."""
    raw_os = getattr(args, "os", None)
    raw_arch = getattr(args, "arch", None)
    if not raw_os and not raw_arch:
        return None

    host = detect_platform()
    return {"osType": raw_os or host.os, "archType": raw_arch or host.arch}


def print_json(data: Any):
    """Write a hook result to stdout."""
    print(json.dumps(data, indent=2))


__all__ = ["load_cli_settings", "build_services", "runtime_from_args", "print_json"]
