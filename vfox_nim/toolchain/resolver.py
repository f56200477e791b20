"""
Resolution engine: picks the artifact to download for a version and platform.

The policy is a decision table over (install strategy, version kind):

    strategy      version  attempt order
    ------------  -------  ---------------------------------------------------
    source        stable   source tarball
    source        ref      GitHub archive
    auto/binary   stable   official binary, exact nightly, then
                           auto: source tarball / binary: fail
    auto/binary   ref      official binary, generic nightly, then
                           auto: GitHub archive / binary: fail

The first verified candidate wins. The returned note names the channel that
fired; it is the only signal telling a fast-path install from a fallback.
Resolution is a pure function of its inputs given the probe outcomes.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from vfox_nim.config.settings import InstallStrategy
from vfox_nim.core.exceptions import NoPrebuiltBinaryError
from vfox_nim.core.platform import Platform
from vfox_nim.core.version import RefVersion, StableVersion, VersionSpec, classify_version
from vfox_nim.toolchain.locator import ArtifactCandidate, ArtifactLocator, Channel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionRequest:
    """Inputs of one resolution."""

    version: str
    platform: Platform
    strategy: InstallStrategy = InstallStrategy.AUTO


@dataclass(frozen=True)
class ResolvedArtifact:
    """
    Outcome of a successful resolution.

    Attributes:
        version: Version to install ('2.2.4', or the ref name without 'ref:')
        url: Artifact download URL
        note: Human-readable description of the channel that was used
        channel: Channel of the artifact
    """

    version: str
    url: str
    note: str
    channel: Channel

    def to_dict(self) -> dict:
        """Hook return value: {version, url, note}."""
        return {"version": self.version, "url": self.url, "note": self.note}


Tier = Callable[[], Optional[ArtifactCandidate]]


class ResolutionEngine:
    """
    Walks the tiers allowed by the install strategy until one yields a URL.

    Example:
        >>> engine = ResolutionEngine(locator)
        >>> artifact = engine.resolve(
        ...     ResolutionRequest("2.2.4", Platform("linux", "x86_64"), InstallStrategy.AUTO)
        ... )
        >>> artifact.note
        'Official binary for linux/x86_64'
    """

    def __init__(self, locator: ArtifactLocator):
        self.locator = locator

    def resolve(self, request: ResolutionRequest) -> ResolvedArtifact:
        """
        Resolve a request to a single artifact.

        Args:
            request: Version, platform and strategy

        Returns:
            ResolvedArtifact

        Raises:
            UnsupportedVersionError: If the version is neither X.Y.Z nor ref:<name>
            NoPrebuiltBinaryError: If the binary strategy finds no binary
        """
        requested = classify_version(request.version)
        platform = request.platform
        strategy = request.strategy

        logger.info(
            f"Resolving Nim {requested} for {platform} (install_method='{strategy.value}')"
        )

        for tier in self._tiers(requested, platform, strategy):
            candidate = tier()
            if candidate is not None:
                artifact = ResolvedArtifact(
                    version=requested.name,
                    url=candidate.url,
                    note=self._note(candidate.channel, requested, platform, strategy),
                    channel=candidate.channel,
                )
                logger.info(f"{artifact.note}: {artifact.url}")
                return artifact

        logger.error(f"No pre-built binary available for Nim {requested} on {platform}")
        raise NoPrebuiltBinaryError(str(requested), platform.platform_string(), strategy.value)

    def _tiers(
        self, requested: VersionSpec, platform: Platform, strategy: InstallStrategy
    ) -> List[Tier]:
        """Ordered tiers for a version kind and strategy."""
        locator = self.locator

        if strategy is InstallStrategy.SOURCE:
            return [lambda: locator.source(requested)]

        tiers: List[Tier] = [lambda: locator.official_binary(requested, platform)]
        if isinstance(requested, StableVersion):
            tiers.append(lambda: locator.exact_nightly(requested, platform))
        else:
            tiers.append(lambda: locator.generic_nightly(requested, platform))

        if strategy is InstallStrategy.AUTO:
            tiers.append(lambda: locator.source(requested))
        return tiers

    @staticmethod
    def _note(
        channel: Channel,
        requested: VersionSpec,
        platform: Platform,
        strategy: InstallStrategy,
    ) -> str:
        if channel is Channel.OFFICIAL_BINARY:
            return f"Official binary for {platform}"
        if channel is Channel.EXACT_NIGHTLY:
            return f"Nightly build matching {requested.name} for {platform}"
        if channel is Channel.GENERIC_NIGHTLY:
            return f"Latest nightly build for {requested.name} on {platform}"
        if isinstance(requested, RefVersion):
            return f"Building from source for {requested}"
        if strategy is InstallStrategy.SOURCE:
            return "Building from source (install_method='source')"
        return f"Building from source (no pre-built binary available for {platform})"


def resolve_artifact(
    version: str,
    platform: Platform,
    strategy: InstallStrategy,
    locator: ArtifactLocator,
) -> ResolvedArtifact:
    """
    Convenience function wrapping ResolutionEngine.resolve().

    Args:
        version: Requested version string
        platform: Normalized target platform
        strategy: Install strategy
        locator: Artifact locator to query

    Returns:
        ResolvedArtifact
    """
    return ResolutionEngine(locator).resolve(ResolutionRequest(version, platform, strategy))


__all__ = [
    "ResolutionRequest",
    "ResolvedArtifact",
    "ResolutionEngine",
    "resolve_artifact",
]
