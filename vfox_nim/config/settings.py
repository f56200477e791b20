"""
Plugin settings.

Settings are layered, lowest precedence first:

1. Built-in defaults
2. Optional YAML file (explicit path, $VFOX_NIM_CONFIG, or
   ~/.config/vfox-nim/config.yaml)
3. Environment variables (VFOX_NIM_INSTALL_METHOD, GITHUB_TOKEN /
   GITHUB_API_TOKEN, MISE_VERBOSE)

Example config.yaml:

    install_method: binary
    http_timeout: 20
    build_timeout: 3600
    cache_dir: ~/.cache/vfox-nim
"""

import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from vfox_nim.core.commit_cache import get_default_cache_dir
from vfox_nim.core.exceptions import ConfigurationError, InvalidInstallMethodError
from vfox_nim.core.http import github_token

logger = logging.getLogger(__name__)

INSTALL_METHOD_ENV = "VFOX_NIM_INSTALL_METHOD"
CONFIG_FILE_ENV = "VFOX_NIM_CONFIG"
VERBOSE_ENV = "MISE_VERBOSE"


class InstallStrategy(Enum):
    """Which artifact channels an installation may use."""

    AUTO = "auto"  # Binaries first, fall back to source
    BINARY = "binary"  # Pre-built binaries only
    SOURCE = "source"  # Always build from source

    @classmethod
    def parse(cls, value: str) -> "InstallStrategy":
        """
        Parse an install_method value, ignoring case and surrounding whitespace.

        Raises:
            InvalidInstallMethodError: If value is not auto, binary or source
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInstallMethodError(value, VALID_INSTALL_METHODS) from None


VALID_INSTALL_METHODS = tuple(s.value for s in InstallStrategy)


def resolve_install_strategy(
    environ: Optional[Mapping[str, str]] = None,
    default: InstallStrategy = InstallStrategy.AUTO,
) -> InstallStrategy:
    """
    Pick the install strategy for this invocation.

    VFOX_NIM_INSTALL_METHOD wins over the configured default.

    Args:
        environ: Environment to read (default: os.environ)
        default: Strategy from configuration

    Returns:
        Selected InstallStrategy

    Raises:
        InvalidInstallMethodError: If the environment value is invalid
    """
    env = os.environ if environ is None else environ
    value = env.get(INSTALL_METHOD_ENV)
    if value:
        return InstallStrategy.parse(value)
    return default


@dataclass(frozen=True)
class Settings:
    """Effective plugin settings for one invocation."""

    install_strategy: InstallStrategy = InstallStrategy.AUTO
    github_token: Optional[str] = field(default=None, repr=False)
    verbose: bool = False
    http_timeout: float = 30.0
    build_timeout: float = 7200.0
    cache_dir: Path = field(default_factory=get_default_cache_dir)


def default_config_file(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Location of the optional user configuration file."""
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_FILE_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".config" / "vfox-nim" / "config.yaml"


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_file: Path to config file

    Returns:
        Configuration mapping (empty if the file does not exist)

    Raises:
        ConfigurationError: If the file cannot be parsed or is not a mapping
    """
    if not config_file.exists():
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_file} must be a mapping")
    return data


def _number(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}") from None


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from defaults, the YAML file and the environment.

    Args:
        config_file: Explicit config file; otherwise default_config_file()
        environ: Environment to read (default: os.environ)

    Returns:
        Settings

    Raises:
        ConfigurationError: On malformed files or invalid values
    """
    env = os.environ if environ is None else environ
    path = config_file or default_config_file(env)
    data = load_yaml_config(path)

    settings = Settings()

    configured_method = data.get("install_method")
    if configured_method is not None:
        settings = replace(
            settings, install_strategy=InstallStrategy.parse(str(configured_method))
        )

    cache_dir = data.get("cache_dir")
    if cache_dir:
        settings = replace(settings, cache_dir=Path(str(cache_dir)).expanduser())

    settings = replace(
        settings,
        http_timeout=_number(data, "http_timeout", settings.http_timeout),
        build_timeout=_number(data, "build_timeout", settings.build_timeout),
        install_strategy=resolve_install_strategy(env, settings.install_strategy),
        github_token=github_token(env),
        verbose=bool(env.get(VERBOSE_ENV)),
    )

    logger.debug(f"Effective settings: {settings}")
    return settings


__all__ = [
    "InstallStrategy",
    "VALID_INSTALL_METHODS",
    "Settings",
    "resolve_install_strategy",
    "load_settings",
    "load_yaml_config",
    "default_config_file",
    "INSTALL_METHOD_ENV",
    "CONFIG_FILE_ENV",
    "VERBOSE_ENV",
]
