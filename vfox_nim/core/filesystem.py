"""
Filesystem helpers for installation trees.

FileProbe is the seam the bootstrapper uses to inspect build markers, so the
stage state machine can be tested against an in-memory set of paths instead
of a real source tree.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from vfox_nim.core.exceptions import VfoxNimError

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


class FilesystemError(VfoxNimError):
    """Base exception for filesystem operation errors."""

    pass


class FileProbe:
    """Answers existence questions about paths on the local filesystem."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent
    """
    try:
        Path(path).resolve().relative_to(Path(parent).resolve())
        return True
    except ValueError:
        return False


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Remove a directory tree, refusing paths outside require_prefix.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None and not is_relative_to(path, Path(require_prefix)):
        raise ValueError(
            f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
        )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, target, exc):
                """Error handler for Windows read-only files."""
                if not os.access(target, os.W_OK):
                    os.chmod(target, 0o777)
                    func(target)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def merge_into(source: Path, destination: Path) -> None:
    """
    Move every entry of source into destination, merging directories.

    Files already present in destination are replaced.

    Args:
        source: Directory whose contents are moved
        destination: Directory receiving the contents
    """
    destination.mkdir(parents=True, exist_ok=True)

    for item in source.iterdir():
        target = destination / item.name
        if item.is_dir() and not item.is_symlink() and target.is_dir():
            merge_into(item, target)
        else:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
            shutil.move(str(item), str(target))


def flatten_nested_root(nested: Path, root: Path) -> None:
    """
    Move the contents of nested up into root and remove nested.

    Args:
        nested: Single top-level directory produced by archive extraction
        root: Installation root that should hold the contents directly

    Raises:
        FilesystemError: If the move or cleanup fails
    """
    logger.info(f"Moving contents of {nested.name}/ into {root}")
    try:
        merge_into(nested, root)
    except OSError as e:
        raise FilesystemError(f"Failed to restructure {nested}: {e}") from e

    safe_rmtree(nested, require_prefix=root)


__all__ = [
    "FileProbe",
    "FilesystemError",
    "is_relative_to",
    "safe_rmtree",
    "merge_into",
    "flatten_nested_root",
]
