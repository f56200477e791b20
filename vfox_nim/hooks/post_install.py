"""
PostInstall hook: turns a downloaded artifact into a verified installation.

Binary archives only need restructuring (and finish.exe on Windows); source
archives go through the koch bootstrap pipeline. Both end with verification.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from vfox_nim.config.settings import InstallStrategy
from vfox_nim.core.exceptions import BinaryInstallationExpectedError, BuildError, CommandError
from vfox_nim.hooks.context import PluginServices, PostInstallRequest
from vfox_nim.toolchain.bootstrap import BuildMarkers, SourceBootstrapper, restructure_archive
from vfox_nim.toolchain.verifier import verify_installation

logger = logging.getLogger(__name__)

WINDOWS_SETUP_PROGRAM = "finish.exe"


class PostInstaller:
    """Runs the post-install steps for one request."""

    def __init__(self, request: PostInstallRequest, services: PluginServices):
        self.request = request
        self.services = services
        self.markers = BuildMarkers(request.install_path, request.platform, services.probe)

    def run(self):
        """
        Restructure, build if needed, verify.

        Raises:
            BinaryInstallationExpectedError: Source tree under install_method='binary'
            BuildError: Corrupt tree or a fatal build stage failure
            VerificationError: If the final installation check fails
        """
        path = self.request.install_path
        restructure_archive(path)

        if self.markers.is_interrupted_source_build():
            logger.info("Resuming interrupted Nim source build...")
            self.build_from_source()
        elif self.markers.is_bootstrapped():
            logger.info("Using pre-built Nim binary")
            if self.request.platform.is_windows:
                self.run_windows_setup()
        elif self.markers.has_build_script():
            if self.request.strategy is InstallStrategy.BINARY:
                logger.error("Source archive found but install_method='binary'")
                raise BinaryInstallationExpectedError(str(path))
            logger.info("Building Nim from source...")
            self.build_from_source()
        else:
            raise BuildError(
                "No Nim binary found and no build scripts available. "
                "Installation may be corrupted."
            )

        verify_installation(
            path, self.request.platform, self.services.executor, self.services.probe
        )
        logger.info("Nim installed successfully!")

    def build_from_source(self):
        bootstrapper = SourceBootstrapper(
            self.request.install_path,
            self.request.platform,
            executor=self.services.executor,
            probe=self.services.probe,
            verbose=self.request.verbose,
            timeout=self.services.settings.build_timeout,
        )
        return bootstrapper.build()

    def run_windows_setup(self) -> bool:
        """
        Run finish.exe if the archive ships it.

        finish.exe configures PATH and looks for a MinGW C compiler. Its
        failure does not fail the installation.

        Returns:
            True if finish.exe ran successfully
        """
        program = self.request.install_path / WINDOWS_SETUP_PROGRAM
        if not self.services.probe.exists(program):
            return False

        logger.info(f"Running Windows post-install setup ({WINDOWS_SETUP_PROGRAM})...")
        try:
            result = self.services.executor.run(
                [str(program)], cwd=self.request.install_path, capture=False
            )
        except CommandError as e:
            logger.warning(f"{WINDOWS_SETUP_PROGRAM} could not run: {e}")
            return False

        if not result.ok:
            logger.warning(
                f"{WINDOWS_SETUP_PROGRAM} failed with exit code {result.returncode}; "
                "you may need to install MinGW manually to compile Nim code"
            )
            return False
        return True


def post_install(
    ctx: Mapping[str, Any],
    services: Optional[PluginServices] = None,
    runtime: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    PostInstall hook entry point.

    Args:
        ctx: Host context carrying sdkInfo.nim.path
        services: Collaborators (default: built from load_settings())
        runtime: Host RUNTIME table with osType/archType

    Returns:
        Empty dict
    """
    services = services or PluginServices.from_settings()
    request = PostInstallRequest.from_context(ctx, services.settings, runtime)
    PostInstaller(request, services).run()
    return {}


__all__ = ["PostInstaller", "post_install", "WINDOWS_SETUP_PROGRAM"]
