"""
Artifact URL construction and existence checks for each download channel.

Channels:
- OFFICIAL_BINARY: nim-lang.org prebuilt archives (Linux and Windows, x86_64/i686)
- EXACT_NIGHTLY:   nim-lang/nightlies build whose tag encodes the exact commit
                   of a stable release, found by probing dated tags
- GENERIC_NIGHTLY: the latest-{ref} nightlies release, found via the releases API
- SOURCE:          release source tarball or GitHub archive of a ref

Every method returns None instead of raising when a channel cannot serve
the request; the resolution engine moves on to the next tier.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from vfox_nim.core.commit_cache import CommitResolver
from vfox_nim.core.http import HttpClient
from vfox_nim.core.platform import I686, LINUX, WINDOWS, X86_64, Platform, platform_filename
from vfox_nim.core.version import RefVersion, StableVersion, VersionSpec

logger = logging.getLogger(__name__)

NIM_DOWNLOAD_BASE = "https://nim-lang.org/download"
NIM_ARCHIVE_BASE = "https://github.com/nim-lang/Nim/archive"
NIGHTLIES_DOWNLOAD_BASE = "https://github.com/nim-lang/nightlies/releases/download"
NIGHTLIES_RELEASES_API = "https://api.github.com/repos/nim-lang/nightlies/releases"

# Days relative to the release commit date. Nightlies are usually built
# shortly after the tagged commit, hence +1 first.
NIGHTLY_DATE_OFFSETS = (1, 0, 2, -1, -2)

NIGHTLY_MAX_PAGES = 4
NIGHTLY_PAGE_SIZE = 100

# Official archive suffixes, keyed by (os, arch)
_OFFICIAL_SUFFIXES = {
    (LINUX, X86_64): "-linux_x64.tar.xz",
    (LINUX, I686): "-linux_x32.tar.xz",
    (WINDOWS, X86_64): "_x64.zip",
    (WINDOWS, I686): "_x32.zip",
}


class Channel(Enum):
    """Distribution channel an artifact comes from."""

    OFFICIAL_BINARY = "official-binary"
    EXACT_NIGHTLY = "exact-nightly"
    GENERIC_NIGHTLY = "generic-nightly"
    SOURCE = "source"

    @property
    def is_binary(self) -> bool:
        return self is not Channel.SOURCE


@dataclass
class ArtifactCandidate:
    """
    A download URL on a given channel.

    Attributes:
        channel: Channel the URL belongs to
        url: Download URL
        exists: True/False once probed, None if never probed
    """

    channel: Channel
    url: str
    exists: Optional[bool] = None


class ArtifactLocator:
    """
    Computes candidate URLs per channel and verifies them.

    Example:
        >>> locator = ArtifactLocator(HttpClient(), commit_resolver)
        >>> candidate = locator.official_binary(StableVersion(2, 2, 4), Platform("linux", "x86_64"))
        >>> candidate.url
        'https://nim-lang.org/download/nim-2.2.4-linux_x64.tar.xz'
    """

    def __init__(self, http: HttpClient, commit_resolver: CommitResolver):
        """
        Initialize locator.

        Args:
            http: Client used for HEAD probes and the releases API
            commit_resolver: Resolves stable versions to commit hash and date
        """
        self.http = http
        self.commit_resolver = commit_resolver

    # ------------------------------------------------------------------
    # URL construction
    # ------------------------------------------------------------------

    def official_url(self, version: VersionSpec, platform: Platform) -> Optional[str]:
        """Official binary URL, or None for platforms without official builds."""
        suffix = _OFFICIAL_SUFFIXES.get((platform.os, platform.arch))
        if suffix is None:
            return None
        return f"{NIM_DOWNLOAD_BASE}/nim-{version.name}{suffix}"

    def source_url(self, version: VersionSpec) -> str:
        """Source archive URL: release tarball, or GitHub archive for refs."""
        if isinstance(version, RefVersion):
            return f"{NIM_ARCHIVE_BASE}/{version.name}.tar.gz"
        return f"{NIM_DOWNLOAD_BASE}/nim-{version.name}.tar.xz"

    @staticmethod
    def nightly_tag(commit_date: date, branch: str, commit_hash: str) -> str:
        """Nightlies release tag, e.g. '2025-04-23-version-2-2-f7145dd...'."""
        return f"{commit_date.isoformat()}-{branch}-{commit_hash}"

    @staticmethod
    def nightly_url(tag: str, version: str, filename: str) -> str:
        return f"{NIGHTLIES_DOWNLOAD_BASE}/{tag}/nim-{version}-{filename}"

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def official_binary(
        self, version: VersionSpec, platform: Platform
    ) -> Optional[ArtifactCandidate]:
        """
        Probe the official binary for a version.

        Official URL patterns 404 for versions that predate binary releases,
        so the URL is only trusted after a HEAD probe.

        Returns:
            Candidate with exists=True, or None
        """
        url = self.official_url(version, platform)
        if url is None:
            logger.debug(f"No official binaries for {platform}")
            return None

        candidate = ArtifactCandidate(Channel.OFFICIAL_BINARY, url)
        candidate.exists = self.http.url_exists(url)
        if not candidate.exists:
            logger.info(f"Official binary not available: {url}")
            return None
        return candidate

    def exact_nightly(
        self, version: StableVersion, platform: Platform
    ) -> Optional[ArtifactCandidate]:
        """
        Find the nightly build made from the exact commit of a release.

        Tries tags dated commit_date + offset for each of NIGHTLY_DATE_OFFSETS,
        in order, and returns the first whose download URL exists.

        Returns:
            Candidate with exists=True, or None
        """
        filename = platform_filename(platform)
        if filename is None:
            logger.debug(f"No nightly builds for {platform}")
            return None

        info = self.commit_resolver.resolve(version.name)
        if info is None:
            return None

        for offset in NIGHTLY_DATE_OFFSETS:
            tag_date = info.commit_date + timedelta(days=offset)
            tag = self.nightly_tag(tag_date, version.release_branch, info.commit_hash)
            url = self.nightly_url(tag, version.name, filename)
            if self.http.url_exists(url):
                logger.debug(f"Found exact nightly at offset {offset:+d}: {url}")
                return ArtifactCandidate(Channel.EXACT_NIGHTLY, url, exists=True)

        logger.info(f"No nightly build found for commit {info.commit_hash}")
        return None

    def generic_nightly(
        self, version: RefVersion, platform: Platform
    ) -> Optional[ArtifactCandidate]:
        """
        Find the latest nightly for a branch via the releases listing.

        Looks for the release tagged 'latest-{ref}' and its asset named after
        the platform filename. The listing proves existence, so no probe.

        Returns:
            Candidate with exists=True, or None
        """
        filename = platform_filename(platform)
        if filename is None:
            logger.debug(f"No nightly builds for {platform}")
            return None

        desired_tag = f"latest-{version.name}"

        for page in range(1, NIGHTLY_MAX_PAGES + 1):
            releases = self.http.get_json(
                NIGHTLIES_RELEASES_API,
                params={"per_page": NIGHTLY_PAGE_SIZE, "page": page},
            )
            if not isinstance(releases, list) or not releases:
                break

            for release in releases:
                if not isinstance(release, dict) or release.get("tag_name") != desired_tag:
                    continue
                for asset in release.get("assets") or []:
                    if asset.get("name") == filename and asset.get("browser_download_url"):
                        return ArtifactCandidate(
                            Channel.GENERIC_NIGHTLY,
                            asset["browser_download_url"],
                            exists=True,
                        )

        logger.info(f"No nightly release {desired_tag} with asset {filename}")
        return None

    def source(self, version: VersionSpec) -> ArtifactCandidate:
        """Source archive; assumed to exist upstream and never probed."""
        return ArtifactCandidate(Channel.SOURCE, self.source_url(version))


__all__ = [
    "Channel",
    "ArtifactCandidate",
    "ArtifactLocator",
    "NIGHTLY_DATE_OFFSETS",
    "NIGHTLY_MAX_PAGES",
    "NIGHTLY_PAGE_SIZE",
    "NIM_DOWNLOAD_BASE",
    "NIM_ARCHIVE_BASE",
    "NIGHTLIES_DOWNLOAD_BASE",
    "NIGHTLIES_RELEASES_API",
]
