"""
Entry point for running the vfox-nim CLI as a module.

Usage: python -m vfox_nim [command] [options]
"""

from vfox_nim.cli.parser import main

if __name__ == "__main__":
    main()
