"""Tests for zip packaging."""

import io
import zipfile

import pytest

from minfo.media.packaging import package_files


class TestPackageFiles:
    """Tests for package_files."""

    def test_files_stored_by_basename_in_order(self, temp_dir):
        """Entries use base names and keep the given order."""
        nested = temp_dir / "shots"
        nested.mkdir()
        paths = []
        for name, data in (("shot_02.png", b"two"), ("shot_01.png", b"one")):
            path = nested / name
            path.write_bytes(data)
            paths.append(path)

        archive = zipfile.ZipFile(io.BytesIO(package_files(paths)))

        assert archive.namelist() == ["shot_02.png", "shot_01.png"]
        assert archive.read("shot_01.png") == b"one"
        assert archive.getinfo("shot_02.png").compress_type == zipfile.ZIP_DEFLATED

    def test_empty_input(self):
        """An empty list still produces a valid archive."""
        archive = zipfile.ZipFile(io.BytesIO(package_files([])))
        assert archive.namelist() == []

    def test_missing_file_raises(self, temp_dir):
        """Unreadable inputs raise OSError."""
        with pytest.raises(OSError):
            package_files([temp_dir / "missing.png"])
