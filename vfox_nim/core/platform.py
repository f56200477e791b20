"""
Platform normalization for vfox-nim.

This module maps the raw OS/architecture identifiers reported by the host
runtime (e.g. 'Darwin', 'AMD64', 'armv7l') into the small canonical
vocabulary used to pick Nim download artifacts.

Canonical values:
- OS: 'linux', 'macos', 'windows'
- Arch: 'x86_64', 'i686', 'aarch64', 'armv7', 'arm64'

'arm64' is kept distinct from 'aarch64' because Nim nightlies brand the
Apple Silicon build as 'macosx_arm64' while Linux ARM builds are 'aarch64'.

Unrecognized inputs pass through lower-cased. Callers treat such a platform
as "no binary available", never as an error.

Usage:
    from vfox_nim.core.platform import Platform, detect_platform, platform_filename

    host = detect_platform()
    print(host.platform_string())          # e.g. 'linux/x86_64'
    print(platform_filename(host))         # e.g. 'linux_x64.tar.xz'
"""

import functools
import platform as _platform
from dataclasses import dataclass
from typing import Optional

LINUX = "linux"
MACOS = "macos"
WINDOWS = "windows"

X86_64 = "x86_64"
I686 = "i686"
AARCH64 = "aarch64"
ARMV7 = "armv7"
ARM64 = "arm64"

# Nightly asset filenames, keyed by (os, arch)
_PLATFORM_FILENAMES = {
    (LINUX, X86_64): "linux_x64.tar.xz",
    (LINUX, I686): "linux_x32.tar.xz",
    (LINUX, AARCH64): "linux_arm64.tar.xz",
    (LINUX, ARMV7): "linux_armv7l.tar.xz",
    (MACOS, X86_64): "macosx_x64.tar.xz",
    (MACOS, ARM64): "macosx_arm64.tar.xz",
    (WINDOWS, X86_64): "windows_x64.zip",
    (WINDOWS, I686): "windows_x32.zip",
}


@dataclass(frozen=True)
class Platform:
    """
    Canonical (OS, architecture) pair.

    Attributes:
        os: Normalized operating system ('linux', 'macos', 'windows', or raw)
        arch: Normalized architecture ('x86_64', 'i686', 'aarch64', 'armv7', 'arm64', or raw)
    """

    os: str
    arch: str

    @classmethod
    def from_raw(cls, raw_os: str, raw_arch: str) -> "Platform":
        """
        Build a Platform from host-reported identifiers.

        Example:
            >>> Platform.from_raw("Darwin", "arm64")
            Platform(os='macos', arch='arm64')
        """
        return cls(os=normalize_os(raw_os), arch=normalize_arch(raw_arch))

    @property
    def is_windows(self) -> bool:
        return self.os == WINDOWS

    @property
    def exe_suffix(self) -> str:
        """Executable suffix for this platform ('.exe' on Windows)."""
        return ".exe" if self.is_windows else ""

    def platform_string(self) -> str:
        """
        Get display string (e.g., 'linux/x86_64', 'macos/arm64').

        Returns:
            OS and architecture joined by '/'
        """
        return f"{self.os}/{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def normalize_os(raw: str) -> str:
    """
    Normalize an operating system name.

    Matching is case-insensitive and by substring. 'darwin' is checked
    before 'win' because it contains it.

    Args:
        raw: OS identifier from the host (e.g. 'Darwin', 'Linux', 'MINGW64_NT')

    Returns:
        'macos', 'linux', 'windows', or the lower-cased input
    """
    name = (raw or "").strip().lower()
    if "darwin" in name:
        return MACOS
    if "linux" in name:
        return LINUX
    if "mingw" in name or "win" in name:
        return WINDOWS
    return name


def normalize_arch(raw: str) -> str:
    """
    Normalize a CPU architecture name.

    Args:
        raw: Architecture identifier from the host (e.g. 'AMD64', 'armv7l')

    Returns:
        Canonical architecture or the lower-cased input
    """
    arch = (raw or "").strip().lower()
    if arch in ("x86_64", "amd64"):
        return X86_64
    if arch in ("i386", "i686", "x86"):
        return I686
    if arch == "aarch64":
        return AARCH64
    if arch in ("armv7", "armv7l"):
        return ARMV7
    if arch == "arm64":
        return ARM64
    return arch


def platform_filename(platform: Platform) -> Optional[str]:
    """
    Get the nightly archive filename suffix for a platform.

    Args:
        platform: Normalized platform

    Returns:
        Filename such as 'linux_x64.tar.xz', or None when Nim publishes no
        binaries for this platform

    Example:
        >>> platform_filename(Platform("macos", "arm64"))
        'macosx_arm64.tar.xz'
        >>> platform_filename(Platform("freebsd", "x86_64")) is None
        True
    """
    return _PLATFORM_FILENAMES.get((platform.os, platform.arch))


@functools.lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """
    Detect the platform this process runs on.

    Cached for the lifetime of the process.
    """
    return Platform.from_raw(_platform.system(), _platform.machine())


def clear_platform_cache():
    """Clear the cached result of detect_platform()."""
    detect_platform.cache_clear()


__all__ = [
    "Platform",
    "normalize_os",
    "normalize_arch",
    "platform_filename",
    "detect_platform",
    "clear_platform_cache",
    "LINUX",
    "MACOS",
    "WINDOWS",
    "X86_64",
    "I686",
    "AARCH64",
    "ARMV7",
    "ARM64",
]
