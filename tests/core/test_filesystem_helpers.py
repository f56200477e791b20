"""
Unit tests for filesystem helpers.
"""

import pytest

from vfox_nim.core.filesystem import (
    FileProbe,
    flatten_nested_root,
    is_relative_to,
    merge_into,
    safe_rmtree,
)


class TestFileProbe:
    def test_exists_and_is_dir(self, tmp_path):
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / "nim").write_text("")
        probe = FileProbe()

        assert probe.exists(tmp_path / "bin" / "nim")
        assert probe.is_dir(tmp_path / "bin")
        assert not probe.exists(tmp_path / "koch")


class TestSafeRmtree:
    """Test safe_rmtree()."""

    def test_removes_directory(self, tmp_path):
        target = tmp_path / "nim-2.2.4"
        (target / "lib").mkdir(parents=True)

        safe_rmtree(target, require_prefix=tmp_path)

        assert not target.exists()

    def test_refuses_outside_prefix(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()

        with pytest.raises(ValueError, match="not under required prefix"):
            safe_rmtree(outside, require_prefix=tmp_path / "install")

        assert outside.exists()

    def test_missing_is_noop(self, tmp_path):
        safe_rmtree(tmp_path / "missing")

    def test_is_relative_to(self, tmp_path):
        assert is_relative_to(tmp_path / "a" / "b", tmp_path)
        assert not is_relative_to(tmp_path, tmp_path / "a")


class TestMergeAndFlatten:
    """Test merge_into() and flatten_nested_root()."""

    def test_merge_into_merges_directories(self, tmp_path):
        source = tmp_path / "src"
        destination = tmp_path / "dst"
        (source / "bin").mkdir(parents=True)
        (source / "bin" / "nim").write_text("new")
        (destination / "bin").mkdir(parents=True)
        (destination / "bin" / "nimble").write_text("kept")

        merge_into(source, destination)

        assert (destination / "bin" / "nim").read_text() == "new"
        assert (destination / "bin" / "nimble").read_text() == "kept"

    def test_merge_into_replaces_files(self, tmp_path):
        source = tmp_path / "src"
        destination = tmp_path / "dst"
        source.mkdir()
        destination.mkdir()
        (source / "koch.nim").write_text("new")
        (destination / "koch.nim").write_text("old")

        merge_into(source, destination)

        assert (destination / "koch.nim").read_text() == "new"

    def test_flatten_nested_root(self, tmp_path):
        nested = tmp_path / "nim-2.2.4"
        (nested / "bin").mkdir(parents=True)
        (nested / "build.sh").write_text("#!/bin/sh\n")
        (nested / "bin" / "nim").write_text("")

        flatten_nested_root(nested, tmp_path)

        assert (tmp_path / "build.sh").exists()
        assert (tmp_path / "bin" / "nim").exists()
        assert not nested.exists()
