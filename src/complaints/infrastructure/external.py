"""
Complaint External Integrations
================================

Attachment storage for complaint images.

Images are written to a local directory under a random name; the
returned reference (`uploads/<name>`) is what the complaint stores.
"""

import os
from pathlib import Path
from uuid import uuid4

import aiofiles
import aiofiles.os

from src.complaints.application import IAttachmentStore, ImageUpload
from src.core import RepositoryException
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class LocalAttachmentStore(IAttachmentStore):
    """Stores uploaded images on the local filesystem."""

    def __init__(self, upload_dir: Path, url_prefix: str = "uploads"):
        self._upload_dir = Path(upload_dir)
        self._url_prefix = url_prefix.rstrip("/")

    async def save(self, upload: ImageUpload) -> str:
        """Write the image and return its reference."""
        self._upload_dir.mkdir(parents=True, exist_ok=True)

        file_ext = os.path.splitext(upload.filename or "")[1].lower()
        saved_filename = f"{uuid4()}{file_ext}"
        file_path = self._upload_dir / saved_filename

        try:
            async with aiofiles.open(file_path, "wb") as out_file:
                await out_file.write(upload.data)
        except OSError as e:
            logger.error("Failed to save attachment", extra={"path": str(file_path), "error": str(e)})
            raise RepositoryException(f"Failed to save file: {upload.filename}") from e

        logger.info("Attachment saved", extra={"path": str(file_path), "size_bytes": len(upload.data)})
        return f"{self._url_prefix}/{saved_filename}"

    async def delete(self, reference: str) -> None:
        """Remove an image by the reference `save` returned."""
        file_path = self._upload_dir / reference.rsplit("/", 1)[-1]
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error("Failed to delete attachment", extra={"path": str(file_path), "error": str(e)})
            raise RepositoryException(f"Failed to delete file: {reference}") from e

        logger.info("Attachment deleted", extra={"path": str(file_path)})
