"""
Env command: print the EnvKeys entries for an installation.
"""

from vfox_nim.cli.utils import print_json
from vfox_nim.hooks.env_keys import env_keys


def run(args) -> int:
    print_json(env_keys({"path": str(args.path)}))
    return 0
