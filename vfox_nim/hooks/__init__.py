"""
Host hook adapters.

Each hook takes the host's context mapping and returns plain data:
- available(ctx) -> [{'version': ...}]
- pre_install(ctx) -> {'version', 'url', 'note'}
- post_install(ctx) -> {}
- mise_env(ctx) -> [{'key', 'value'}]
- env_keys(ctx) -> [{'key', 'value'}]
"""

from vfox_nim.hooks.available import available
from vfox_nim.hooks.context import PluginServices
from vfox_nim.hooks.env_keys import env_keys
from vfox_nim.hooks.mise_env import mise_env
from vfox_nim.hooks.post_install import post_install
from vfox_nim.hooks.pre_install import pre_install

__all__ = [
    "PluginServices",
    "available",
    "pre_install",
    "post_install",
    "mise_env",
    "env_keys",
]
