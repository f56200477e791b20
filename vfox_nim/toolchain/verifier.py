"""
Installation verification.

The only end-to-end correctness gate: after either a binary or a source
install, bin/nim must exist and `nim --version` must identify itself as the
Nim compiler. Both failures are fatal.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from vfox_nim.core.exceptions import CommandError, VerificationError
from vfox_nim.core.executor import CommandExecutor
from vfox_nim.core.filesystem import FileProbe
from vfox_nim.core.platform import Platform

logger = logging.getLogger(__name__)

VERSION_MARKER = "Nim Compiler"
VERSION_CHECK_TIMEOUT = 60


@dataclass
class CheckResult:
    """Result of a single verification check."""

    name: str
    passed: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VerificationResult:
    """Result of installation verification."""

    success: bool = True
    checks_passed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_check(self, result: CheckResult):
        if result.passed:
            self.checks_passed.append(result.name)
            logger.debug(f"{result.name}: {result.message}")
        else:
            self.errors.append(f"{result.name}: {result.message}")
            self.success = False


def nim_binary_path(install_path: Path, platform: Platform) -> Path:
    """Expected compiler location, bin/nim or bin/nim.exe."""
    return Path(install_path) / "bin" / f"nim{platform.exe_suffix}"


class FilePresenceCheck:
    """Verify the compiler binary exists."""

    def __init__(self, platform: Platform, probe: Optional[FileProbe] = None):
        self.platform = platform
        self.probe = probe or FileProbe()

    def check(self, install_path: Path) -> CheckResult:
        binary = nim_binary_path(install_path, self.platform)
        if not self.probe.exists(binary):
            return CheckResult(
                name="binary", passed=False, message=f"Nim binary not found at {binary}"
            )
        return CheckResult(name="binary", passed=True, message=f"Found {binary}")


class VersionCheck:
    """Verify `nim --version` reports the Nim compiler."""

    def __init__(self, platform: Platform, executor: Optional[CommandExecutor] = None):
        self.platform = platform
        self.executor = executor or CommandExecutor()

    def check(self, install_path: Path) -> CheckResult:
        binary = nim_binary_path(install_path, self.platform)

        try:
            result = self.executor.run(
                [str(binary), "--version"], timeout=VERSION_CHECK_TIMEOUT
            )
        except CommandError as e:
            return CheckResult(
                name="version", passed=False, message=f"Version check failed: {e}"
            )

        if not result.ok:
            return CheckResult(
                name="version",
                passed=False,
                message=f"nim --version exited with code {result.returncode}",
                details={"output": result.output},
            )

        if VERSION_MARKER not in result.output:
            return CheckResult(
                name="version",
                passed=False,
                message=f"Unexpected nim --version output: {result.output.strip()[:100]}",
                details={"output": result.output},
            )

        first_line = result.output.strip().splitlines()[0]
        return CheckResult(
            name="version",
            passed=True,
            message=first_line,
            details={"output": result.output},
        )


class InstallationVerifier:
    """
    Runs the presence and version checks, stopping at the first failure.

    Example:
        >>> verifier = InstallationVerifier(Platform("linux", "x86_64"))
        >>> result = verifier.verify(Path("/opt/nim"))
        >>> result.success
        True
    """

    def __init__(
        self,
        platform: Platform,
        executor: Optional[CommandExecutor] = None,
        probe: Optional[FileProbe] = None,
    ):
        self.checks = [
            FilePresenceCheck(platform, probe),
            VersionCheck(platform, executor),
        ]

    def verify(self, install_path: Path) -> VerificationResult:
        logger.info(f"Verifying Nim installation at {install_path}")
        result = VerificationResult()

        for check in self.checks:
            check_result = check.check(Path(install_path))
            result.add_check(check_result)
            if not check_result.passed:
                logger.error(f"Verification failed: {check_result.message}")
                break

        return result


def verify_installation(
    install_path: Path,
    platform: Platform,
    executor: Optional[CommandExecutor] = None,
    probe: Optional[FileProbe] = None,
) -> VerificationResult:
    """
    Verify an installation and raise if it is broken.

    Args:
        install_path: Installation root
        platform: Host platform
        executor: Command executor for `nim --version`
        probe: File probe for the binary check

    Returns:
        VerificationResult of the passing run

    Raises:
        VerificationError: If the binary is missing or not a Nim compiler
    """
    result = InstallationVerifier(platform, executor, probe).verify(install_path)
    if not result.success:
        raise VerificationError(
            f"Nim installation at {install_path} is broken: {'; '.join(result.errors)}"
        )
    logger.info("Nim installation verified")
    return result


__all__ = [
    "CheckResult",
    "VerificationResult",
    "FilePresenceCheck",
    "VersionCheck",
    "InstallationVerifier",
    "nim_binary_path",
    "verify_installation",
    "VERSION_MARKER",
]
