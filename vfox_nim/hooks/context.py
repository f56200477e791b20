"""
Translation of host hook contexts into immutable request structs.

The host runtime (vfox or mise) passes each hook a loosely-typed context
table. Hooks never read it directly: the adapters here pull out what a hook
needs, apply settings and environment, and hand plain dataclasses to the
pure resolution and build code.

Context keys read:
- PreInstall:  ctx['version']
- PostInstall: ctx['sdkInfo'][PLUGIN_NAME]['path'] (or ctx['path'])
- EnvKeys:     ctx['path']
- MiseEnv:     ctx['options']['install_method']
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from vfox_nim.config.settings import InstallStrategy, Settings, load_settings
from vfox_nim.core.commit_cache import CACHE_FILE_NAME, CommitCache, CommitResolver
from vfox_nim.core.exceptions import ConfigurationError
from vfox_nim.core.executor import CommandExecutor
from vfox_nim.core.filesystem import FileProbe
from vfox_nim.core.http import HttpClient
from vfox_nim.core.platform import Platform, detect_platform
from vfox_nim.metadata import PLUGIN_NAME
from vfox_nim.toolchain.locator import ArtifactLocator

logger = logging.getLogger(__name__)

NIMBLE_DIR_ENV = "NIMBLE_DIR"


def _require(ctx: Mapping[str, Any], key: str, hook: str) -> Any:
    value = ctx.get(key)
    if value in (None, ""):
        raise ConfigurationError(f"{hook}: hook context is missing '{key}'")
    return value


def host_platform(runtime: Optional[Mapping[str, str]] = None) -> Platform:
    """
    Platform reported by the host runtime, or the local machine's.

    Args:
        runtime: Host RUNTIME table with 'osType' and 'archType'
    """
    if runtime and runtime.get("osType") and runtime.get("archType"):
        return Platform.from_raw(runtime["osType"], runtime["archType"])
    return detect_platform()


# ============================================================================
# Requests
# ============================================================================


@dataclass(frozen=True)
class PreInstallRequest:
    """Inputs of the PreInstall hook."""

    version: str
    platform: Platform
    strategy: InstallStrategy

    @classmethod
    def from_context(
        cls,
        ctx: Mapping[str, Any],
        settings: Settings,
        runtime: Optional[Mapping[str, str]] = None,
    ) -> "PreInstallRequest":
        version = str(_require(ctx, "version", "PreInstall")).strip()
        return cls(version, host_platform(runtime), settings.install_strategy)


@dataclass(frozen=True)
class PostInstallRequest:
    """Inputs of the PostInstall hook."""

    install_path: Path
    platform: Platform
    strategy: InstallStrategy
    verbose: bool = False

    @classmethod
    def from_context(
        cls,
        ctx: Mapping[str, Any],
        settings: Settings,
        runtime: Optional[Mapping[str, str]] = None,
    ) -> "PostInstallRequest":
        sdk_info = (ctx.get("sdkInfo") or {}).get(PLUGIN_NAME) or {}
        path = sdk_info.get("path") or ctx.get("path")
        if not path:
            raise ConfigurationError(
                f"PostInstall: hook context has no install path (sdkInfo.{PLUGIN_NAME}.path)"
            )
        return cls(
            install_path=Path(path),
            platform=host_platform(runtime),
            strategy=settings.install_strategy,
            verbose=settings.verbose,
        )


@dataclass(frozen=True)
class EnvKeysRequest:
    """
    Inputs of the EnvKeys hook.

    Attributes:
        install_path: Installation root of the active version
        nimble_dir: NIMBLE_DIR already set in the environment, if any
        cwd: Working directory, checked for a project-local nimbledeps/
    """

    install_path: Path
    nimble_dir: Optional[str]
    cwd: Optional[Path]

    @classmethod
    def from_context(
        cls, ctx: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None
    ) -> "EnvKeysRequest":
        env = os.environ if environ is None else environ
        path = _require(ctx, "path", "EnvKeys")
        cwd = env.get("PWD") or os.getcwd()
        return cls(
            install_path=Path(path),
            nimble_dir=env.get(NIMBLE_DIR_ENV) or None,
            cwd=Path(cwd) if cwd else None,
        )


@dataclass(frozen=True)
class MiseEnvRequest:
    """Inputs of the MiseEnv hook: the raw install_method option."""

    install_method: str = InstallStrategy.AUTO.value

    @classmethod
    def from_context(cls, ctx: Mapping[str, Any]) -> "MiseEnvRequest":
        options = ctx.get("options") or {}
        value = options.get("install_method")
        if value is None or value == "":
            return cls()
        return cls(str(value))


# ============================================================================
# Collaborators
# ============================================================================


@dataclass
class PluginServices:
    """
    External collaborators shared by the hooks.

    Tests build one from fakes; hosts use from_settings().
    """

    settings: Settings
    http: HttpClient
    executor: CommandExecutor
    probe: FileProbe
    commit_resolver: CommitResolver

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PluginServices":
        settings = settings or load_settings()
        http = HttpClient(token=settings.github_token, timeout=settings.http_timeout)
        executor = CommandExecutor()
        cache = CommitCache(settings.cache_dir / CACHE_FILE_NAME)
        return cls(
            settings=settings,
            http=http,
            executor=executor,
            probe=FileProbe(),
            commit_resolver=CommitResolver(cache, http, executor),
        )

    def locator(self) -> ArtifactLocator:
        return ArtifactLocator(self.http, self.commit_resolver)


__all__ = [
    "PreInstallRequest",
    "PostInstallRequest",
    "EnvKeysRequest",
    "MiseEnvRequest",
    "PluginServices",
    "host_platform",
    "NIMBLE_DIR_ENV",
]
