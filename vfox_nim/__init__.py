"""
vfox-nim: Nim compiler version manager plugin for vfox and mise.

Resolves, downloads and installs Nim toolchains from official binaries,
nightly builds or source.
"""

__version__ = "0.1.0"
