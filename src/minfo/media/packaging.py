"""Zip packaging for captured screenshots."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterable
from pathlib import Path


def package_files(paths: Iterable[Path | str]) -> bytes:
    """Bundle files into an in-memory zip archive.

    Each file is stored deflated under its base name, in the given order.

    Raises:
        OSError: If a file cannot be read.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in paths:
            path = Path(path)
            archive.write(path, arcname=path.name)
    return buffer.getvalue()
