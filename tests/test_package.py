"""Tests for minfo package."""


def test_package_imports():
    """Test that the package can be imported successfully."""
    import minfo

    assert minfo is not None


def test_package_version():
    """Test that the package has a version string."""
    from minfo import __version__

    assert __version__ == "0.1.0"
