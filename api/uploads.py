"""
Local file storage for the upload endpoint.

Files are written under a single directory and renamed to the current
time in milliseconds followed by the original extension. There is no
type or size validation and no cleanup.
"""

import time
from pathlib import Path
from typing import Optional

import structlog
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from api.models import UploadedFile

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


def build_filename(original_name: str, now: Optional[float] = None) -> str:
    """
    Name a stored upload: epoch milliseconds plus the original extension.

    >>> build_filename("cover.png", now=1700000000.25)
    '1700000000250.png'
    """
    if now is None:
        now = time.time()
    return f"{int(now * 1000)}{Path(original_name or '').suffix}"


class UploadStorage:
    """Writes uploaded files into ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    async def save(self, upload: UploadFile, fieldname: str = "file") -> UploadedFile:
        """
        Persist an upload and describe it.

        Args:
            upload: File received by the framework
            fieldname: Multipart field the file arrived in

        Returns:
            Metadata of the stored file
        """
        filename = build_filename(upload.filename)
        target = self.directory / filename

        await run_in_threadpool(self.directory.mkdir, parents=True, exist_ok=True)

        size = 0
        out = await run_in_threadpool(target.open, "wb")
        try:
            try:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await run_in_threadpool(out.write, chunk)
                    size += len(chunk)
            finally:
                await run_in_threadpool(out.close)
        except Exception:
            # Partial files are never left behind
            await run_in_threadpool(target.unlink, missing_ok=True)
            logger.warning("Discarded partial upload", filename=filename, written=size)
            raise

        logger.info(
            "File stored",
            originalname=upload.filename,
            filename=filename,
            size=size
        )

        return UploadedFile(
            fieldname=fieldname,
            originalname=upload.filename or "",
            mimetype=upload.content_type,
            destination=str(self.directory),
            filename=filename,
            path=str(target),
            size=size,
        )
