"""
External command execution.

The bootstrapper drives Nim's own build scripts and compilers, and the
commit lookup shells out to git. Both go through CommandExecutor so tests
can substitute a fake that returns canned exit codes and output.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from vfox_nim.core.exceptions import CommandError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return (self.stdout or "") + (self.stderr or "")


class CommandExecutor:
    """
    Runs commands with subprocess, capturing output and enforcing a timeout.

    Example:
        >>> executor = CommandExecutor()
        >>> result = executor.run(["git", "--version"])
        >>> result.ok
        True
    """

    def __init__(self, default_timeout: Optional[float] = DEFAULT_TIMEOUT):
        """
        Initialize executor.

        Args:
            default_timeout: Timeout in seconds used when run() gets none
        """
        self.default_timeout = default_timeout

    def run(
        self,
        args: Sequence[Union[str, Path]],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
        capture: bool = True,
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            args: Program and arguments
            cwd: Working directory
            timeout: Timeout in seconds (default: executor default)
            capture: Capture stdout/stderr; when False output goes to the
                parent's streams

        Returns:
            CommandResult, also for non-zero exits

        Raises:
            CommandError: If the program is missing or the timeout expires
        """
        argv = [str(a) for a in args]
        timeout = timeout if timeout is not None else self.default_timeout
        logger.debug(f"Running: {' '.join(argv)} (cwd={cwd})")

        try:
            completed = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                capture_output=capture,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise CommandError(f"Command not found: {argv[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Command timed out after {timeout}s: {' '.join(argv)}"
            ) from e
        except OSError as e:
            raise CommandError(f"Failed to run {argv[0]}: {e}") from e

        return CommandResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


__all__ = ["CommandExecutor", "CommandResult", "DEFAULT_TIMEOUT"]
