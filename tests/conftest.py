"""
Pytest configuration and shared fixtures for vfox-nim tests.
"""

import pytest

from vfox_nim.config.settings import InstallStrategy, Settings
from vfox_nim.core.commit_cache import CommitCache
from vfox_nim.core.filesystem import FileProbe
from vfox_nim.core.platform import Platform
from vfox_nim.hooks.context import PluginServices
from tests.fakes import (
    NIM_224_COMMIT,
    FakeCommitResolver,
    FakeExecutor,
    FakeHttp,
    MemoryProbe,
)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if config.getoption("--integration"):
        return
    skip_integration = pytest.mark.skip(reason="need --integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def memory_probe() -> MemoryProbe:
    return MemoryProbe()


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def commit_resolver() -> FakeCommitResolver:
    return FakeCommitResolver({"2.2.4": NIM_224_COMMIT})


@pytest.fixture
def linux_x64() -> Platform:
    return Platform("linux", "x86_64")


@pytest.fixture
def macos_arm64() -> Platform:
    return Platform("macos", "arm64")


@pytest.fixture
def windows_x64() -> Platform:
    return Platform("windows", "x86_64")


@pytest.fixture
def commit_cache(tmp_path) -> CommitCache:
    return CommitCache(tmp_path / "cache" / "version-commits.txt")


@pytest.fixture
def make_services(tmp_path, fake_http, fake_executor, commit_resolver):
    """Factory for PluginServices wired to the fakes."""

    def factory(strategy=InstallStrategy.AUTO, probe=None, verbose=False):
        settings = Settings(
            install_strategy=strategy, verbose=verbose, cache_dir=tmp_path / "cache"
        )
        return PluginServices(
            settings=settings,
            http=fake_http,
            executor=fake_executor,
            probe=probe or FileProbe(),
            commit_resolver=commit_resolver,
        )

    return factory
