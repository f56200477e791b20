"""
Core building blocks for vfox-nim.

This module provides:
- Platform normalization
- Version classification
- HTTP access with failures downgraded to "not found"
- Commit/date cache for exact nightly lookups
- External command execution
- Filesystem helpers for installation trees
"""

from vfox_nim.core.exceptions import (
    VfoxNimError,
    ConfigurationError,
    InvalidInstallMethodError,
    ResolutionError,
    UnsupportedVersionError,
    NoPrebuiltBinaryError,
    CommandError,
    BuildError,
    BuildStageError,
    MissingBuildScriptError,
    BinaryInstallationExpectedError,
    VerificationError,
)
from vfox_nim.core.platform import (
    Platform,
    detect_platform,
    normalize_arch,
    normalize_os,
    platform_filename,
)
from vfox_nim.core.version import (
    RefVersion,
    StableVersion,
    VersionSpec,
    classify_version,
    is_ref,
    is_stable,
    to_branch,
)

__all__ = [
    # Exceptions
    "VfoxNimError",
    "ConfigurationError",
    "InvalidInstallMethodError",
    "ResolutionError",
    "UnsupportedVersionError",
    "NoPrebuiltBinaryError",
    "CommandError",
    "BuildError",
    "BuildStageError",
    "MissingBuildScriptError",
    "BinaryInstallationExpectedError",
    "VerificationError",
    # Platform
    "Platform",
    "detect_platform",
    "normalize_os",
    "normalize_arch",
    "platform_filename",
    # Version
    "StableVersion",
    "RefVersion",
    "VersionSpec",
    "classify_version",
    "is_stable",
    "is_ref",
    "to_branch",
]
