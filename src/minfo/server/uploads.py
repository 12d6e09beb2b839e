"""Request input staging.

Tool endpoints accept either a ``path`` form field naming a file or
directory on the server, or an uploaded ``file``. Uploads are streamed to a
private temporary file whose removal is owned by the returned ScopedRelease.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from aiohttp import BodyPartReader, web

from minfo.core.errors import SourceNotFoundError
from minfo.core.release import ScopedRelease
from minfo.server.api.errors import RequestError

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "minfo-"
CHUNK_SIZE = 1 << 16


@dataclass(frozen=True)
class StagedInput:
    """Input path for a request plus the guard that cleans it up."""

    path: Path
    release: ScopedRelease


def clean_input_path(value: str) -> str:
    """Normalize a user supplied path: trim whitespace and surrounding quotes."""
    value = value.strip().strip('"')
    return os.path.normpath(value) if value else ""


def _existing_path(value: str) -> Path:
    path = Path(value)
    try:
        path.stat()
    except OSError as e:
        raise SourceNotFoundError(path, e.strerror) from e
    return path


def _remove_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove staged upload %s: %s", path, e)


async def _stage_part(part: BodyPartReader, max_bytes: int) -> Path:
    suffix = Path(part.filename or "").suffix
    fd, name = await asyncio.to_thread(
        tempfile.mkstemp, prefix=UPLOAD_PREFIX, suffix=suffix
    )
    staged = Path(name)
    received = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while chunk := await part.read_chunk(CHUNK_SIZE):
                received += len(chunk)
                if received > max_bytes:
                    raise RequestError("request body too large", status=413)
                await asyncio.to_thread(out.write, chunk)
    except BaseException:
        await asyncio.to_thread(_remove_file, staged)
        raise
    logger.debug("Staged upload %s (%d bytes)", staged, received)
    return staged


async def stage_input(request: web.Request, max_bytes: int) -> StagedInput:
    """Determine the input path for a tool request.

    A non-empty ``path`` field wins over an uploaded ``file``; any upload
    received alongside it is discarded.

    Args:
        request: Incoming request with a multipart or urlencoded form body.
        max_bytes: Maximum accepted upload size.

    Returns:
        StagedInput. Its release removes a staged upload and is a no-op for
        server-side paths.

    Raises:
        RequestError: If neither field is present or the body is malformed.
        SourceNotFoundError: If the named path does not exist.
    """
    path_value = ""
    staged: Path | None = None

    content_type = request.content_type
    try:
        if content_type.startswith("multipart/"):
            reader = await request.multipart()
            async for part in reader:
                if not isinstance(part, BodyPartReader):
                    continue
                if part.name == "path":
                    path_value = await part.text()
                elif part.name == "file" and part.filename and staged is None:
                    staged = await _stage_part(part, max_bytes)
                else:
                    await part.release()
        elif content_type == "application/x-www-form-urlencoded":
            form = await request.post()
            path_value = str(form.get("path", ""))
        else:
            raise RequestError("request Content-Type isn't multipart/form-data")
    except ValueError as e:
        # Malformed multipart framing
        if staged is not None:
            await asyncio.to_thread(_remove_file, staged)
        raise RequestError(f"invalid form body: {e}") from e
    except BaseException:
        if staged is not None:
            await asyncio.to_thread(_remove_file, staged)
        raise

    path_value = clean_input_path(path_value)
    if path_value:
        if staged is not None:
            await asyncio.to_thread(_remove_file, staged)
        path = await asyncio.to_thread(_existing_path, path_value)
        return StagedInput(path, ScopedRelease.noop())

    if staged is None:
        raise RequestError("missing file or path")

    async def _cleanup() -> None:
        await asyncio.to_thread(_remove_file, staged)

    return StagedInput(staged, ScopedRelease(_cleanup, label=f"upload {staged}"))
