"""
Source bootstrap pipeline: turns an extracted Nim source tree into a toolchain.

Stages, in order:
1. Archive restructure: lift the contents of a nested nim-*/ directory
2. config/build_config.txt synthesis, required by the build scripts
3. Bootstrap compiler (build_all.sh / build.sh, build_all.bat / build.bat)
4. koch, compiled with the bootstrap compiler
5. koch boot: the full compiler
6. koch tools
7. koch nimble (failure is only a warning)

Each stage is skipped when its completion marker already exists on disk, so
re-running the pipeline after an interrupted install resumes where the last
run stopped. Markers are exposed as named predicates on BuildMarkers and read
through a FileProbe, so the state machine is testable without a real tree.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from vfox_nim.core.exceptions import BuildStageError, CommandError, MissingBuildScriptError
from vfox_nim.core.executor import CommandExecutor, CommandResult
from vfox_nim.core.filesystem import FileProbe, flatten_nested_root
from vfox_nim.core.platform import Platform

logger = logging.getLogger(__name__)

DEFAULT_BUILD_TIMEOUT = 7200

BUILD_CONFIG_PATH = Path("config") / "build_config.txt"

# The build scripts source this file but some source tarballs ship without it.
BUILD_CONFIG_CONTENT = """\
nim_comment="key-value pairs for windows/posix bootstrapping build scripts"
nim_csourcesDir=csources_v2
nim_csourcesUrl=https://github.com/nim-lang/csources_v2.git
nim_csourcesBranch=master
nim_csourcesHash=86742fb02c6606ab01a532a0085784effb2e753e
"""

POSIX_BUILD_SCRIPTS = ("build_all.sh", "build.sh")
WINDOWS_BUILD_SCRIPTS = ("build_all.bat", "build.bat")

# nim-2.2.4/ from release tarballs, Nim-devel/ from GitHub archives
_NESTED_ROOT_RE = re.compile(r"^nim-.+", re.IGNORECASE)

_OUTPUT_TAIL_LINES = 20


class StageStatus(Enum):
    """What happened to a stage during a run."""

    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"  # Non-fatal stages only


@dataclass
class BuildStage:
    """
    One step of the pipeline.

    Attributes:
        name: Short identifier ('bootstrap', 'koch', 'boot', 'tools', 'nimble')
        description: Progress message logged before running
        command: Builds the argv to run
        is_complete: Completion marker predicate; None means always run
        fatal: Whether a non-zero exit aborts the pipeline
        quiet: Suppress command output unless verbose mode is on
    """

    name: str
    description: str
    command: Callable[[], List[str]]
    is_complete: Optional[Callable[[], bool]] = None
    fatal: bool = True
    quiet: bool = False


@dataclass
class BuildReport:
    """Per-stage outcome of a pipeline run."""

    stages: List[tuple] = field(default_factory=list)

    def record(self, name: str, status: StageStatus):
        self.stages.append((name, status))

    def status_of(self, name: str) -> Optional[StageStatus]:
        for stage_name, status in self.stages:
            if stage_name == name:
                return status
        return None


class BuildMarkers:
    """
    Filesystem markers that encode how far a source build has progressed.

    Example:
        >>> markers = BuildMarkers(Path("/opt/nim"), Platform("linux", "x86_64"))
        >>> markers.nim_binary
        PosixPath('/opt/nim/bin/nim')
    """

    def __init__(self, root: Path, platform: Platform, probe: Optional[FileProbe] = None):
        self.root = Path(root)
        self.platform = platform
        self.probe = probe or FileProbe()

    def _bin(self, name: str) -> Path:
        return self.root / "bin" / f"{name}{self.platform.exe_suffix}"

    @property
    def nim_binary(self) -> Path:
        return self._bin("nim")

    @property
    def koch_binary(self) -> Path:
        return self.root / f"koch{self.platform.exe_suffix}"

    @property
    def tools_marker(self) -> Path:
        return self._bin("nimgrep")

    @property
    def nimble_binary(self) -> Path:
        return self._bin("nimble")

    @property
    def build_config(self) -> Path:
        return self.root / BUILD_CONFIG_PATH

    def is_bootstrapped(self) -> bool:
        """A compiler binary exists at bin/nim."""
        return self.probe.exists(self.nim_binary)

    def is_meta_tool_built(self) -> bool:
        """The koch build tool has been compiled."""
        return self.probe.exists(self.koch_binary)

    def are_tools_built(self) -> bool:
        """koch tools has run (bin/nimgrep exists)."""
        return self.probe.exists(self.tools_marker)

    def is_package_manager_built(self) -> bool:
        """bin/nimble exists."""
        return self.probe.exists(self.nimble_binary)

    def has_build_config(self) -> bool:
        return self.probe.exists(self.build_config)

    def is_interrupted_source_build(self) -> bool:
        """
        bin/nim exists in a source tree whose koch stages never finished.

        Binary archives ship the tools, so a missing tools marker next to
        koch.nim and a build script means an earlier build stopped early.
        """
        return (
            self.is_bootstrapped()
            and not self.are_tools_built()
            and self.probe.exists(self.root / "koch.nim")
            and self.has_build_script()
        )

    def build_script(self) -> Optional[Path]:
        """Primary build script if present, else the legacy-named one."""
        names = WINDOWS_BUILD_SCRIPTS if self.platform.is_windows else POSIX_BUILD_SCRIPTS
        for name in names:
            script = self.root / name
            if self.probe.exists(script):
                return script
        return None

    def has_build_script(self) -> bool:
        """True if the tree holds any build script, for either platform family."""
        return any(
            self.probe.exists(self.root / name)
            for name in POSIX_BUILD_SCRIPTS + WINDOWS_BUILD_SCRIPTS
        )


# ============================================================================
# Archive restructure
# ============================================================================


def _looks_like_toolchain_root(path: Path) -> bool:
    names = ("bin", "koch.nim") + POSIX_BUILD_SCRIPTS + WINDOWS_BUILD_SCRIPTS
    return any((path / name).exists() for name in names)


def find_nested_root(install_path: Path) -> Optional[Path]:
    """
    Find a nim-*/ directory that holds the real toolchain tree.

    Some hosts extract archives with their top-level directory, others strip
    it. When install_path already holds the tree there is nothing to find.

    Args:
        install_path: Installation root

    Returns:
        The nested directory, or None if the root is already flat
    """
    install_path = Path(install_path)
    if not install_path.is_dir() or _looks_like_toolchain_root(install_path):
        return None

    candidates = sorted(
        p for p in install_path.iterdir() if p.is_dir() and _NESTED_ROOT_RE.match(p.name)
    )
    for candidate in candidates:
        if _looks_like_toolchain_root(candidate):
            return candidate
    return candidates[0] if candidates else None


def restructure_archive(install_path: Path) -> bool:
    """
    Move the contents of a nested nim-*/ directory up into install_path.

    Returns:
        True if the tree was restructured
    """
    nested = find_nested_root(install_path)
    if nested is None:
        return False

    logger.info("Restructuring extracted archive...")
    flatten_nested_root(nested, Path(install_path))
    return True


# ============================================================================
# Pipeline
# ============================================================================


class SourceBootstrapper:
    """
    Drives the multi-stage Nim source build.

    Example:
        >>> bootstrapper = SourceBootstrapper(Path("/opt/nim"), Platform("linux", "x86_64"))
        >>> report = bootstrapper.build()
        >>> report.status_of("nimble")
        <StageStatus.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        install_path: Path,
        platform: Platform,
        executor: Optional[CommandExecutor] = None,
        probe: Optional[FileProbe] = None,
        verbose: bool = False,
        timeout: float = DEFAULT_BUILD_TIMEOUT,
    ):
        """
        Initialize bootstrapper.

        Args:
            install_path: Root of the extracted source tree
            platform: Host platform (selects .bat vs .sh and .exe suffixes)
            executor: Command executor (default: subprocess-based)
            probe: File probe for completion markers
            verbose: Show output of quiet stages (MISE_VERBOSE)
            timeout: Per-stage timeout in seconds
        """
        self.install_path = Path(install_path)
        self.platform = platform
        self.executor = executor or CommandExecutor()
        self.markers = BuildMarkers(self.install_path, platform, probe)
        self.verbose = verbose
        self.timeout = timeout

    def ensure_build_config(self) -> bool:
        """
        Write config/build_config.txt if it is missing.

        Returns:
            True if the file was created
        """
        if self.markers.has_build_config():
            return False

        path = self.markers.build_config
        logger.info(f"Creating missing {BUILD_CONFIG_PATH}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(BUILD_CONFIG_CONTENT, encoding="utf-8")
        return True

    def _bootstrap_command(self) -> List[str]:
        script = self.markers.build_script()
        if script is None:
            family = "Windows" if self.platform.is_windows else "POSIX"
            raise MissingBuildScriptError(
                f"No {family} build script found in {self.install_path}"
            )
        if self.platform.is_windows:
            return ["cmd", "/c", script.name]
        return ["sh", script.name]

    def _koch_command(self, *args: str) -> List[str]:
        return [str(self.markers.koch_binary), *args, "-d:release"]

    def stages(self) -> List[BuildStage]:
        """Build stages 3-7 in execution order."""
        markers = self.markers
        koch_source = "koch.nim" if self.platform.is_windows else "koch"

        return [
            BuildStage(
                name="bootstrap",
                description="Bootstrapping Nim compiler...",
                command=self._bootstrap_command,
                is_complete=markers.is_bootstrapped,
            ),
            BuildStage(
                name="koch",
                description="Building koch build tool...",
                command=lambda: [
                    str(markers.nim_binary),
                    "c",
                    "--skipParentCfg:on",
                    "-d:release",
                    koch_source,
                ],
                is_complete=markers.is_meta_tool_built,
                quiet=True,
            ),
            BuildStage(
                name="boot",
                description="Building Nim with koch...",
                command=lambda: self._koch_command("boot"),
                quiet=True,
            ),
            BuildStage(
                name="tools",
                description="Building Nim tools...",
                command=lambda: self._koch_command("tools"),
                is_complete=markers.are_tools_built,
                quiet=True,
            ),
            BuildStage(
                name="nimble",
                description="Building nimble package manager...",
                command=lambda: self._koch_command("nimble"),
                is_complete=markers.is_package_manager_built,
                fatal=False,
                quiet=True,
            ),
        ]

    def run_stage(self, stage: BuildStage) -> StageStatus:
        """
        Run one stage unless its marker says it is already done.

        Raises:
            BuildStageError: If a fatal stage fails
            MissingBuildScriptError: If the bootstrap stage has no script
        """
        if stage.is_complete is not None and stage.is_complete():
            logger.debug(f"Stage '{stage.name}' already complete, skipping")
            return StageStatus.SKIPPED

        logger.info(stage.description)
        argv = stage.command()
        capture = stage.quiet and not self.verbose

        try:
            result = self.executor.run(
                argv, cwd=self.install_path, timeout=self.timeout, capture=capture
            )
        except CommandError as e:
            return self._stage_failed(stage, str(e), None)

        if result.ok:
            return StageStatus.COMPLETED
        return self._stage_failed(
            stage, f"Command failed: {' '.join(argv)}", result
        )

    def _stage_failed(
        self, stage: BuildStage, message: str, result: Optional[CommandResult]
    ) -> StageStatus:
        returncode = result.returncode if result else None
        if not stage.fatal:
            logger.warning(
                f"Stage '{stage.name}' failed ({message}); continuing without it. "
                "Not every Nim version can build this component."
            )
            return StageStatus.FAILED

        output = _tail(result.output) if result else ""
        logger.error(f"Stage '{stage.name}' failed: {message}")
        raise BuildStageError(
            stage.name, f"Failed to build Nim ({stage.name}): {message}", returncode, output
        )

    def build(self) -> BuildReport:
        """
        Run the whole pipeline, fail-fast on fatal stages.

        Returns:
            BuildReport with the status of every stage
        """
        report = BuildReport()
        self.ensure_build_config()

        for stage in self.stages():
            status = self.run_stage(stage)
            report.record(stage.name, status)

            if stage.name == "koch" and not self.markers.is_meta_tool_built():
                raise BuildStageError(
                    "koch", f"koch was not produced at {self.markers.koch_binary}"
                )

        logger.info("Source build complete!")
        return report


def _tail(output: str, lines: int = _OUTPUT_TAIL_LINES) -> str:
    return "\n".join(output.strip().splitlines()[-lines:])


__all__ = [
    "BUILD_CONFIG_CONTENT",
    "BUILD_CONFIG_PATH",
    "BuildMarkers",
    "BuildReport",
    "BuildStage",
    "SourceBootstrapper",
    "StageStatus",
    "find_nested_root",
    "restructure_archive",
]
