"""
Image storage providers.
The Cloudinary provider stores image bytes under a namespaced folder and returns a
permanent URL plus the provider's public id.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.utils.exceptions import UploadProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredImage:
    """What the provider returns for one stored file."""
    url: str
    external_id: str


class ImageStorage(Protocol):
    """Provider contract used by ImageService."""

    async def store(self, content: bytes, filename: str) -> StoredImage:
        ...

    async def destroy(self, external_id: str) -> bool:
        ...


class CloudinaryImageStorage:
    """
    Cloudinary-backed image storage.

    Credentials are passed with every call instead of through the SDK's global
    configuration, so several instances with different accounts can coexist.
    The SDK is blocking and runs in Starlette's thread pool.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str,
        max_width: int = 1000,
        max_height: int = 1000,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.transformation: List[Dict[str, Any]] = [
            {"width": max_width, "height": max_height, "crop": "limit"}
        ]

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryImageStorage":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            max_width=settings.image_max_width,
            max_height=settings.image_max_height,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _credentials(self) -> Dict[str, str]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }

    def _ensure_configured(self) -> None:
        if not self.configured:
            logger.error("Cloudinary credentials are missing; image storage is unavailable")
            raise UploadProviderError("Image storage is not configured. Please contact support.")

    def _upload(self, content: bytes, filename: str) -> Dict[str, Any]:
        stream = io.BytesIO(content)
        stream.name = filename or "upload"
        return cloudinary.uploader.upload(
            stream,
            folder=self.folder,
            resource_type="image",
            transformation=self.transformation,
            **self._credentials(),
        )

    def _destroy(self, external_id: str) -> Dict[str, Any]:
        return cloudinary.uploader.destroy(
            external_id,
            resource_type="image",
            invalidate=True,
            **self._credentials(),
        )

    async def store(self, content: bytes, filename: str) -> StoredImage:
        """
        Upload one image.

        Raises:
            UploadProviderError: If Cloudinary is unconfigured, unreachable or rejects the file
        """
        self._ensure_configured()
        try:
            response = await run_in_threadpool(self._upload, content, filename)
        except (cloudinary.exceptions.Error, OSError) as e:
            logger.error(f"Cloudinary upload failed for {filename!r}: {e}")
            raise UploadProviderError() from e

        url: Optional[str] = response.get("secure_url") or response.get("url")
        public_id: Optional[str] = response.get("public_id")
        if not url or not public_id:
            logger.error(f"Cloudinary returned an incomplete upload response for {filename!r}")
            raise UploadProviderError()

        logger.debug(f"Stored {filename!r} as {public_id}")
        return StoredImage(url=url, external_id=public_id)

    async def destroy(self, external_id: str) -> bool:
        """
        Delete one image by public id.

        Returns:
            True if the image was removed, False if it was already absent

        Raises:
            UploadProviderError: If Cloudinary is unconfigured or the call fails
        """
        self._ensure_configured()
        try:
            response = await run_in_threadpool(self._destroy, external_id)
        except (cloudinary.exceptions.Error, OSError) as e:
            logger.error(f"Cloudinary destroy failed for {external_id}: {e}")
            raise UploadProviderError("Failed to delete image from cloud storage.") from e

        result = response.get("result")
        if result == "ok":
            return True
        if result == "not found":
            logger.debug(f"Image {external_id} was already absent from storage")
            return False

        logger.error(f"Unexpected Cloudinary destroy result for {external_id}: {result!r}")
        raise UploadProviderError("Failed to delete image from cloud storage.")
