"""
Version classification for Nim version strings.

A requested version is either:
- stable: a release of the form 'X.Y.Z' (e.g. '2.2.4')
- ref: a moving branch or commit pointer prefixed 'ref:' (e.g. 'ref:devel')

is_stable() and is_ref() are computed independently. classify_version()
turns a raw string into a typed VersionSpec and rejects anything that is
neither, so every caller sees the same policy for unclassifiable input.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from vfox_nim.core.exceptions import UnsupportedVersionError

REF_PREFIX = "ref:"

_STABLE_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")
_BRANCH_RE = re.compile(r"([0-9]+)\.([0-9]+)")


@dataclass(frozen=True)
class StableVersion:
    """A released Nim version."""

    major: int
    minor: int
    patch: int

    @property
    def name(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def release_branch(self) -> str:
        """Release branch name, e.g. 'version-2-2' for 2.2.4."""
        return f"version-{self.major}-{self.minor}"

    @property
    def tag(self) -> str:
        """Git tag of the release, e.g. 'v2.2.4'."""
        return f"v{self.name}"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RefVersion:
    """A branch or commit reference (the part after 'ref:')."""

    name: str

    def __str__(self) -> str:
        return f"{REF_PREFIX}{self.name}"


VersionSpec = Union[StableVersion, RefVersion]


def is_stable(version: str) -> bool:
    """True iff version is exactly three dot-separated integers."""
    return _STABLE_RE.fullmatch(version) is not None


def is_ref(version: str) -> bool:
    """True iff version starts with the literal prefix 'ref:'."""
    return version.startswith(REF_PREFIX)


def to_branch(version: str) -> Optional[str]:
    """
    Derive the release branch name from a version string.

    Args:
        version: Version string starting with 'major.minor'

    Returns:
        'version-{major}-{minor}', or None if the version does not start with
        two dot-separated integers

    Example:
        >>> to_branch("2.2.0")
        'version-2-2'
        >>> to_branch("not-a-version") is None
        True
    """
    match = _BRANCH_RE.match(version)
    if not match:
        return None
    return f"version-{match.group(1)}-{match.group(2)}"


def classify_version(version: str) -> VersionSpec:
    """
    Classify a raw version string.

    Args:
        version: Version requested by the user

    Returns:
        StableVersion or RefVersion

    Raises:
        UnsupportedVersionError: If the string is neither X.Y.Z nor ref:<name>,
            or the ref name is empty
    """
    match = _STABLE_RE.fullmatch(version)
    if match:
        return StableVersion(*(int(part) for part in match.groups()))
    if is_ref(version):
        name = version[len(REF_PREFIX):]
        if name:
            return RefVersion(name)
    raise UnsupportedVersionError(version)


__all__ = [
    "StableVersion",
    "RefVersion",
    "VersionSpec",
    "REF_PREFIX",
    "is_stable",
    "is_ref",
    "to_branch",
    "classify_version",
]
