"""
Unit tests for installation verification.
"""

import pytest

from vfox_nim.core.exceptions import CommandError, VerificationError
from vfox_nim.toolchain.verifier import (
    InstallationVerifier,
    nim_binary_path,
    verify_installation,
)
from tests.fakes import FakeExecutor, MemoryProbe

NIM_VERSION_OUTPUT = """\
Nim Compiler Version 2.2.4 [Linux: amd64]
Compiled at 2025-04-22
Copyright (c) 2006-2025 by Andreas Rumpf
"""


@pytest.fixture
def installed(tmp_path, linux_x64):
    return MemoryProbe(nim_binary_path(tmp_path, linux_x64))


class TestVerifyInstallation:
    """Test verify_installation()."""

    def test_passes(self, tmp_path, linux_x64, installed):
        executor = FakeExecutor().on("--version", stdout=NIM_VERSION_OUTPUT)

        result = verify_installation(tmp_path, linux_x64, executor, installed)

        assert result.success
        assert result.checks_passed == ["binary", "version"]
        assert executor.commands() == [f"{tmp_path / 'bin' / 'nim'} --version"]

    def test_missing_binary(self, tmp_path, linux_x64):
        executor = FakeExecutor()

        with pytest.raises(VerificationError, match="Nim binary not found"):
            verify_installation(tmp_path, linux_x64, executor, MemoryProbe())

        assert executor.calls == []

    def test_windows_binary_name(self, tmp_path, windows_x64):
        assert nim_binary_path(tmp_path, windows_x64) == tmp_path / "bin" / "nim.exe"

    def test_wrong_output(self, tmp_path, linux_x64, installed):
        executor = FakeExecutor().on("--version", stdout="Segmentation fault")

        with pytest.raises(VerificationError, match="Unexpected nim --version output"):
            verify_installation(tmp_path, linux_x64, executor, installed)

    def test_non_zero_exit(self, tmp_path, linux_x64, installed):
        executor = FakeExecutor().on("--version", returncode=127, stdout=NIM_VERSION_OUTPUT)

        with pytest.raises(VerificationError, match="exited with code 127"):
            verify_installation(tmp_path, linux_x64, executor, installed)

    def test_execution_failure(self, tmp_path, linux_x64, installed):
        executor = FakeExecutor().on("--version", raises=CommandError("Command not found"))

        with pytest.raises(VerificationError, match="Version check failed"):
            verify_installation(tmp_path, linux_x64, executor, installed)

    def test_marker_on_stderr_accepted(self, tmp_path, linux_x64, installed):
        executor = FakeExecutor().on("--version", stderr=NIM_VERSION_OUTPUT)

        assert InstallationVerifier(linux_x64, executor, installed).verify(tmp_path).success
