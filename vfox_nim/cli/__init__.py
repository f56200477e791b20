"""
vfox-nim CLI module.

This module provides the command-line interface for vfox-nim.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
