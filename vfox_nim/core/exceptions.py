"""
Centralized exception hierarchy for vfox-nim.

Internal helpers (locator, commit cache) never raise these for network
problems; they downgrade to "not found". Only terminal outcomes of the
resolution engine, fatal bootstrap stages, verification and configuration
raise to the caller.
"""

from typing import Iterable, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class VfoxNimError(Exception):
    """Base exception for all vfox-nim errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(VfoxNimError):
    """Raised when plugin configuration is invalid."""

    pass


class InvalidInstallMethodError(ConfigurationError):
    """Raised when install_method is not one of the supported strategies."""

    def __init__(self, value: str, valid: Iterable[str]):
        self.value = value
        self.valid = list(valid)
        options = ", ".join(f"'{v}'" for v in self.valid)
        super().__init__(f"Invalid install_method '{value}'. Valid options: {options}")


# ============================================================================
# Resolution Exceptions
# ============================================================================


class ResolutionError(VfoxNimError):
    """Raised when no artifact can be resolved for a version."""

    pass


class UnsupportedVersionError(ResolutionError):
    """Raised when a version string is neither X.Y.Z nor ref:<name>."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Unrecognized Nim version '{version}'. "
            "Expected a release version (e.g. 2.2.4) or a ref (e.g. ref:devel)."
        )


class NoPrebuiltBinaryError(ResolutionError):
    """Raised when the binary strategy finds no pre-built artifact."""

    def __init__(self, version: str, platform: str, strategy: str):
        self.version = version
        self.platform = platform
        self.strategy = strategy
        super().__init__(
            f"No pre-built binary available for Nim {version} on {platform} "
            f"(no prebuilt binary available from official releases or nightlies). "
            f"Building from source is disabled by install_method='{strategy}'. "
            "Use install_method='auto' or 'source' to allow a source build."
        )


# ============================================================================
# Build Exceptions
# ============================================================================


class CommandError(VfoxNimError):
    """Raised when an external command cannot be run at all."""

    pass


class BuildError(VfoxNimError):
    """Base exception for source build errors."""

    pass


class MissingBuildScriptError(BuildError):
    """Raised when a source tree has no bootstrap build script."""

    pass


class BinaryInstallationExpectedError(BuildError):
    """Raised when install_method='binary' lands on a source tree."""

    def __init__(self, install_path: str):
        self.install_path = install_path
        super().__init__(
            f"Binary installation expected at {install_path}, but only Nim "
            "sources were found and install_method='binary' forbids building "
            "from source."
        )


class BuildStageError(BuildError):
    """Raised when a fatal build stage exits with a non-zero status."""

    def __init__(
        self,
        stage: str,
        message: str,
        returncode: Optional[int] = None,
        output: str = "",
    ):
        self.stage = stage
        self.returncode = returncode
        self.output = output
        detail = message
        if returncode is not None:
            detail += f" (exit code {returncode})"
        if output:
            detail += f"\n{output}"
        super().__init__(detail)


# ============================================================================
# Verification Exceptions
# ============================================================================


class VerificationError(VfoxNimError):
    """Raised when an installed toolchain fails verification."""

    pass


__all__ = [
    "VfoxNimError",
    "ConfigurationError",
    "InvalidInstallMethodError",
    "ResolutionError",
    "UnsupportedVersionError",
    "NoPrebuiltBinaryError",
    "CommandError",
    "BuildError",
    "MissingBuildScriptError",
    "BinaryInstallationExpectedError",
    "BuildStageError",
    "VerificationError",
]
