"""
Image service for validating listing image uploads and forwarding them to storage.
All constraints are checked before any provider call; a batch that fails part-way
releases the images it already stored.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from fastapi import UploadFile

from app.config import Settings
from app.services.storage import ImageStorage
from app.utils.exceptions import (
    PayloadTooLargeError,
    TooManyFilesError,
    UnsupportedMediaTypeError,
    UploadProviderError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadConstraints:
    """Limits applied to one upload batch."""
    allowed_types: Sequence[str] = field(default_factory=lambda: ("jpeg", "jpg", "png", "gif", "webp"))
    max_file_size: int = 5 * 1024 * 1024
    max_files: int = 8

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadConstraints":
        return cls(
            allowed_types=tuple(settings.allowed_image_types),
            max_file_size=settings.max_image_size,
            max_files=settings.max_images_per_listing,
        )


@dataclass
class ImageUpload:
    """A raw file payload received from the client."""
    filename: str
    content_type: Optional[str]
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadedImage:
    """An image stored with the provider."""
    url: str
    external_id: str
    original_filename: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "external_id": self.external_id,
            "original_filename": self.original_filename,
        }


class ImageService:
    """Validates image batches and manages their lifecycle with the storage provider."""

    def __init__(self, storage: ImageStorage, constraints: Optional[UploadConstraints] = None):
        self.storage = storage
        self.constraints = constraints or UploadConstraints()

    def _is_allowed_type(self, upload: ImageUpload) -> bool:
        """Accept a file when either its extension or its declared content type is allowed."""
        allowed = {t.lower() for t in self.constraints.allowed_types}

        extension = Path(upload.filename or "").suffix.lower().lstrip(".")
        if extension in allowed:
            return True

        content_type = (upload.content_type or "").lower().split(";")[0].strip()
        if content_type.startswith("image/") and content_type.split("/", 1)[1] in allowed:
            return True

        return False

    def validate(self, uploads: Sequence[ImageUpload]) -> None:
        """
        Check a batch against the upload constraints.

        Raises:
            TooManyFilesError: If the batch holds more files than allowed
            UnsupportedMediaTypeError: If a file matches no allowed type
            PayloadTooLargeError: If a file exceeds the size limit
        """
        if len(uploads) > self.constraints.max_files:
            raise TooManyFilesError(len(uploads), self.constraints.max_files)

        for upload in uploads:
            if not self._is_allowed_type(upload):
                raise UnsupportedMediaTypeError(upload.filename, list(self.constraints.allowed_types))
            if upload.size > self.constraints.max_file_size:
                raise PayloadTooLargeError(upload.filename, self.constraints.max_file_size)

    async def read_uploads(self, files: Optional[Iterable[UploadFile]]) -> List[ImageUpload]:
        """
        Read incoming multipart files into memory; empty file inputs are skipped.
        The batch size and every declared file size are checked before any file is
        read, and no file is read past the size limit.

        Raises:
            TooManyFilesError: If the batch holds more files than allowed
            PayloadTooLargeError: If a file exceeds the size limit
        """
        files = [file for file in files or [] if file.filename]
        if len(files) > self.constraints.max_files:
            raise TooManyFilesError(len(files), self.constraints.max_files)

        limit = self.constraints.max_file_size
        for file in files:
            if file.size is not None and file.size > limit:
                raise PayloadTooLargeError(file.filename, limit)

        uploads = []
        for file in files:
            content = await file.read(limit + 1)
            if len(content) > limit:
                raise PayloadTooLargeError(file.filename, limit)
            uploads.append(
                ImageUpload(
                    filename=file.filename,
                    content_type=file.content_type,
                    content=content,
                )
            )
        return uploads

    async def upload(self, uploads: Sequence[ImageUpload]) -> List[UploadedImage]:
        """
        Validate and store a batch of images, preserving input order.

        Args:
            uploads: Files to store; an empty batch is valid and stores nothing

        Returns:
            Stored images in input order

        Raises:
            TooManyFilesError, UnsupportedMediaTypeError, PayloadTooLargeError: On constraint violations
            UploadProviderError: If the provider fails; images stored earlier in the batch are released
        """
        self.validate(uploads)

        uploaded: List[UploadedImage] = []
        for upload in uploads:
            try:
                stored = await self.storage.store(upload.content, upload.filename)
            except UploadProviderError:
                logger.error(
                    f"Upload of {upload.filename!r} failed after {len(uploaded)} of {len(uploads)} images; "
                    f"releasing stored images"
                )
                await self.discard(uploaded)
                raise

            uploaded.append(
                UploadedImage(
                    url=stored.url,
                    external_id=stored.external_id,
                    original_filename=upload.filename,
                )
            )

        if uploaded:
            logger.info(f"Uploaded {len(uploaded)} images")
        return uploaded

    async def delete(self, external_id: str) -> bool:
        """
        Delete one stored image. Deleting an absent image is not an error.

        Returns:
            True if the image was removed, False if it was already absent
        """
        return await self.storage.destroy(external_id)

    async def discard(self, external_ids: Iterable) -> int:
        """
        Best-effort deletion of several images; each one is attempted exactly once.
        Accepts external ids or objects carrying an ``external_id`` attribute.

        Returns:
            Number of images the provider confirmed as removed
        """
        released = 0
        for item in external_ids:
            external_id = getattr(item, "external_id", item)
            try:
                if await self.delete(external_id):
                    released += 1
            except UploadProviderError as e:
                logger.warning(f"Failed to delete image {external_id} from storage: {e.detail}")
        return released
