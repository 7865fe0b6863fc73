"""
Video Upload Storage - writes uploaded video files to a local directory.

Files are stored as they arrive. There is no transcoding, thumbnailing
or metadata extraction; the only checks are count, content type and
size.
"""

import asyncio
import functools
import logging
from pathlib import Path
from typing import BinaryIO

from fastapi import UploadFile, status

from ..core.config import UploadConfig
from ..core.exceptions import UploadRejected
from ..core.utils import build_upload_name
from ..models.schemas import UploadedFile

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class FileTooLarge(Exception):
    """Raised by the copy loop once a file passes the size limit."""


def _copy_limited(source: BinaryIO, target: Path, max_bytes: int) -> int:
    """
    Copy ``source`` to ``target`` in chunks, stopping past ``max_bytes``.

    Returns:
        Number of bytes written
    """
    written = 0
    if hasattr(source, "seek"):
        source.seek(0)
    with target.open("wb") as buffer:
        while True:
            chunk = source.read(_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                raise FileTooLarge(target.name)
            buffer.write(chunk)
    return written


class VideoUploadStorage:
    """
    Stores uploaded videos under ``config.directory``.

    Files are validated up front; if a file turns out to be too large
    while copying, every file already written for the same request is
    removed again.
    """

    def __init__(self, config: UploadConfig, url_prefix: str = "/uploads"):
        self.directory = Path(config.directory)
        self.max_files = config.max_files
        self.max_bytes = config.max_bytes
        self.allowed_prefix = config.allowed_prefix
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _validate(self, files: list[UploadFile]) -> None:
        if not files:
            raise UploadRejected(status.HTTP_400_BAD_REQUEST, "No files uploaded")

        if len(files) > self.max_files:
            raise UploadRejected(
                status.HTTP_400_BAD_REQUEST,
                f"Too many files: at most {self.max_files} videos per upload",
                error=f"received {len(files)}"
            )

        for upload in files:
            content_type = upload.content_type or ""
            if not content_type.startswith(self.allowed_prefix):
                raise UploadRejected(
                    status.HTTP_400_BAD_REQUEST,
                    "Only video files are allowed",
                    error=f"{upload.filename or 'file'} has type '{content_type or 'unknown'}'"
                )

    async def save(self, files: list[UploadFile]) -> list[UploadedFile]:
        """
        Validate and store ``files``.

        Returns:
            One descriptor per stored file, in upload order

        Raises:
            UploadRejected: On a count, type or size violation
        """
        self._validate(files)
        self.ensure_directory()

        loop = asyncio.get_running_loop()
        stored: list[UploadedFile] = []
        written_paths: list[Path] = []

        try:
            for upload in files:
                filename = build_upload_name(upload.filename)
                target = self.directory / filename
                written_paths.append(target)

                copy_operation = functools.partial(
                    _copy_limited, upload.file, target, self.max_bytes
                )
                size = await loop.run_in_executor(None, copy_operation)

                stored.append(UploadedFile(
                    filename=filename,
                    original_name=upload.filename,
                    content_type=upload.content_type,
                    size=size,
                    url=f"{self.url_prefix}/{filename}"
                ))
                logger.info(f"Stored upload {upload.filename!r} as {filename} ({size} bytes)")
        except FileTooLarge as e:
            self._discard(written_paths)
            raise UploadRejected(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                f"File too large: limit is {self.max_bytes} bytes per video",
                error=str(e)
            ) from e
        except OSError:
            self._discard(written_paths)
            raise

        return stored

    def _discard(self, paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove partial upload {path}: {e}")
