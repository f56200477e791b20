"""
Tests for plugin metadata.
"""

from vfox_nim import __version__
from vfox_nim.metadata import PLUGIN, parse_legacy_file


class TestPluginMetadata:
    def test_fields(self):
        assert PLUGIN["name"] == "nim"
        assert PLUGIN["version"] == __version__
        assert PLUGIN["legacyFilenames"] == [".nim-version"]


class TestParseLegacyFile:
    def test_first_non_empty_line(self, tmp_path):
        path = tmp_path / ".nim-version"
        path.write_text("\n  2.2.4  \nignored\n")

        assert parse_legacy_file(path) == "2.2.4"

    def test_ref_version(self, tmp_path):
        path = tmp_path / ".nim-version"
        path.write_text("ref:devel\n")

        assert parse_legacy_file(path) == "ref:devel"

    def test_empty_file(self, tmp_path):
        path = tmp_path / ".nim-version"
        path.write_text("\n\n")

        assert parse_legacy_file(path) is None

    def test_missing_file(self, tmp_path):
        assert parse_legacy_file(tmp_path / ".nim-version") is None
