"""
Unit tests for the resolution engine's decision table.
"""

import pytest

from vfox_nim.config.settings import InstallStrategy
from vfox_nim.core.exceptions import NoPrebuiltBinaryError, UnsupportedVersionError
from vfox_nim.core.platform import Platform
from vfox_nim.toolchain.locator import NIGHTLIES_RELEASES_API, ArtifactLocator, Channel
from vfox_nim.toolchain.resolver import (
    ResolutionEngine,
    ResolutionRequest,
    ResolvedArtifact,
    resolve_artifact,
)
from tests.fakes import NIM_224_COMMIT, FakeHttp

OFFICIAL_LINUX = "https://nim-lang.org/download/nim-2.2.4-linux_x64.tar.xz"
EXACT_MACOS = (
    "https://github.com/nim-lang/nightlies/releases/download/"
    f"2025-04-23-version-2-2-{NIM_224_COMMIT.commit_hash}/nim-2.2.4-macosx_arm64.tar.xz"
)
DEVEL_MACOS = "https://github.com/nim-lang/nightlies/releases/download/latest-devel/nim-macosx_arm64.tar.xz"

AUTO = InstallStrategy.AUTO
BINARY = InstallStrategy.BINARY
SOURCE = InstallStrategy.SOURCE


@pytest.fixture
def resolve(commit_resolver):
    """resolve(version, platform, strategy, http) -> ResolvedArtifact"""

    def _resolve(version, platform, strategy, http):
        engine = ResolutionEngine(ArtifactLocator(http, commit_resolver))
        return engine.resolve(ResolutionRequest(version, platform, strategy))

    return _resolve


def devel_releases():
    return {
        (NIGHTLIES_RELEASES_API, 1): [
            {
                "tag_name": "latest-devel",
                "assets": [{"name": "macosx_arm64.tar.xz", "browser_download_url": DEVEL_MACOS}],
            }
        ]
    }


class TestOfficialBinaryTier:
    """Official binaries are always attempted first."""

    @pytest.mark.parametrize("strategy", [AUTO, BINARY])
    def test_linux_official_binary(self, resolve, linux_x64, strategy):
        artifact = resolve("2.2.4", linux_x64, strategy, FakeHttp(existing=[OFFICIAL_LINUX]))

        assert "linux_x64" in artifact.url
        assert artifact.channel is Channel.OFFICIAL_BINARY
        assert artifact.note == "Official binary for linux/x86_64"
        assert artifact.version == "2.2.4"

    def test_official_checked_before_nightly(self, resolve, linux_x64):
        http = FakeHttp(existing=[OFFICIAL_LINUX])

        resolve("2.2.4", linux_x64, AUTO, http)

        assert http.head_calls == [OFFICIAL_LINUX]


class TestStableFallbacks:
    """Stable versions on platforms without official binaries."""

    def test_exact_nightly(self, resolve, macos_arm64):
        artifact = resolve("2.2.4", macos_arm64, AUTO, FakeHttp(existing=[EXACT_MACOS]))

        assert artifact.url == EXACT_MACOS
        assert artifact.channel is Channel.EXACT_NIGHTLY
        assert artifact.note == "Nightly build matching 2.2.4 for macos/arm64"

    def test_auto_falls_back_to_source(self, resolve, macos_arm64):
        artifact = resolve("2.2.4", macos_arm64, AUTO, FakeHttp())

        assert artifact.url.endswith(".tar.xz")
        assert "2.2.4" in artifact.url
        assert artifact.url == "https://nim-lang.org/download/nim-2.2.4.tar.xz"
        assert artifact.channel is Channel.SOURCE
        assert artifact.note == "Building from source (no pre-built binary available for macos/arm64)"

    def test_binary_fails_without_binary(self, resolve, macos_arm64):
        with pytest.raises(NoPrebuiltBinaryError) as exc_info:
            resolve("2.2.4", macos_arm64, BINARY, FakeHttp())

        message = str(exc_info.value)
        assert "no prebuilt binary available" in message.lower()
        assert "binary" in message
        assert "macos/arm64" in message
        assert "install_method='binary'" in message

    def test_official_404_linux_falls_to_exact_nightly(self, resolve, linux_x64):
        nightly = EXACT_MACOS.replace("macosx_arm64", "linux_x64")

        artifact = resolve("2.2.4", linux_x64, BINARY, FakeHttp(existing=[nightly]))

        assert artifact.url == nightly
        assert artifact.channel is Channel.EXACT_NIGHTLY


class TestRefVersions:
    """ref:<name> versions."""

    def test_generic_nightly(self, resolve, macos_arm64):
        artifact = resolve("ref:devel", macos_arm64, AUTO, FakeHttp(json=devel_releases()))

        assert artifact.url == DEVEL_MACOS
        assert artifact.version == "devel"
        assert artifact.note == "Latest nightly build for devel on macos/arm64"

    def test_auto_falls_back_to_archive(self, resolve, macos_arm64):
        artifact = resolve("ref:devel", macos_arm64, AUTO, FakeHttp())

        assert artifact.url == "https://github.com/nim-lang/Nim/archive/devel.tar.gz"
        assert artifact.note == "Building from source for ref:devel"

    def test_binary_fails(self, resolve, macos_arm64):
        with pytest.raises(NoPrebuiltBinaryError, match="(?i)no prebuilt binary available"):
            resolve("ref:devel", macos_arm64, BINARY, FakeHttp())

    def test_does_not_resolve_commits(self, resolve, macos_arm64, commit_resolver):
        resolve("ref:devel", macos_arm64, AUTO, FakeHttp())

        assert commit_resolver.calls == []


class TestSourceStrategy:
    """install_method='source' skips every binary channel."""

    def test_ref_archive_without_probe(self, resolve, linux_x64):
        http = FakeHttp(existing=[OFFICIAL_LINUX])

        artifact = resolve("ref:devel", linux_x64, SOURCE, http)

        assert artifact.url.endswith("/archive/devel.tar.gz")
        assert http.head_calls == []
        assert http.get_calls == []

    def test_stable_tarball(self, resolve, linux_x64):
        http = FakeHttp(existing=[OFFICIAL_LINUX])

        artifact = resolve("2.2.4", linux_x64, SOURCE, http)

        assert artifact.url == "https://nim-lang.org/download/nim-2.2.4.tar.xz"
        assert artifact.note == "Building from source (install_method='source')"
        assert http.head_calls == []


class TestUnclassifiable:
    """Garbage versions fail before any I/O, whatever the strategy."""

    @pytest.mark.parametrize("strategy", [AUTO, BINARY, SOURCE])
    def test_raises_before_io(self, resolve, linux_x64, strategy):
        http = FakeHttp()

        with pytest.raises(UnsupportedVersionError):
            resolve("latest", linux_x64, strategy, http)

        assert http.head_calls == []
        assert http.get_calls == []


class TestDeterminism:
    def test_same_inputs_same_result(self, resolve, macos_arm64):
        first = resolve("2.2.4", macos_arm64, AUTO, FakeHttp(existing=[EXACT_MACOS]))
        second = resolve("2.2.4", macos_arm64, AUTO, FakeHttp(existing=[EXACT_MACOS]))

        assert first == second


class TestResolvedArtifact:
    def test_to_dict(self):
        artifact = ResolvedArtifact("2.2.4", "https://x", "Official binary for linux/x86_64", Channel.OFFICIAL_BINARY)
        assert artifact.to_dict() == {
            "version": "2.2.4",
            "url": "https://x",
            "note": "Official binary for linux/x86_64",
        }

    def test_resolve_artifact_helper(self, commit_resolver):
        locator = ArtifactLocator(FakeHttp(), commit_resolver)

        artifact = resolve_artifact("2.2.4", Platform("freebsd", "x86_64"), AUTO, locator)

        assert artifact.channel is Channel.SOURCE
