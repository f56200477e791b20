"""
Nim toolchain acquisition.

This package provides:
- Artifact location per download channel (locator)
- Tiered resolution under an install strategy (resolver)
- The koch-based source build pipeline (bootstrap)
- Post-install verification (verifier)
"""

from vfox_nim.toolchain.bootstrap import (
    BuildMarkers,
    SourceBootstrapper,
    StageStatus,
    restructure_archive,
)
from vfox_nim.toolchain.locator import ArtifactCandidate, ArtifactLocator, Channel
from vfox_nim.toolchain.resolver import (
    ResolutionEngine,
    ResolutionRequest,
    ResolvedArtifact,
    resolve_artifact,
)
from vfox_nim.toolchain.verifier import InstallationVerifier, verify_installation

__all__ = [
    # Locator
    "ArtifactCandidate",
    "ArtifactLocator",
    "Channel",
    # Resolver
    "ResolutionEngine",
    "ResolutionRequest",
    "ResolvedArtifact",
    "resolve_artifact",
    # Bootstrap
    "BuildMarkers",
    "SourceBootstrapper",
    "StageStatus",
    "restructure_archive",
    # Verification
    "InstallationVerifier",
    "verify_installation",
]
