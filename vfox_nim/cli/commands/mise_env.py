"""
Mise-env command: validate install_method and print the exported variable.
"""

from vfox_nim.cli.utils import print_json
from vfox_nim.hooks.mise_env import mise_env


def run(args) -> int:
    options = {}
    if args.install_method is not None:
        options["install_method"] = args.install_method
    print_json(mise_env({"options": options}))
    return 0
