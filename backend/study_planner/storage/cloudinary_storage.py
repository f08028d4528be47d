from __future__ import annotations

import logging
from pathlib import PurePath

import cloudinary
import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError
import httpx

from study_planner.storage.base import FileStorage, StorageError, StoredFile

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "raw"


class CloudinaryStorage(FileStorage):
    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        download_timeout: float = 30.0,
    ):
        if not (cloud_name and api_key and api_secret):
            raise StorageError("Cloudinary credentials are not configured")
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        self.download_timeout = download_timeout

    def upload(
        self, data: bytes, *, filename: str, folder: str, content_type: str | None = None
    ) -> StoredFile:
        try:
            result = cloudinary.uploader.upload(
                data,
                resource_type=RESOURCE_TYPE,
                folder=folder,
                public_id=PurePath(filename).name,
                use_filename=True,
                unique_filename=True,
            )
        except CloudinaryError as exc:
            logger.error("Cloudinary upload failed for %s: %s", filename, exc)
            raise StorageError(str(exc)) from exc
        url = result.get("secure_url") or result.get("url")
        public_id = result.get("public_id")
        if not url or not public_id:
            raise StorageError("Invalid file upload response")
        logger.info("Uploaded %s to Cloudinary as %s", filename, public_id)
        return StoredFile(url=url.replace("http://", "https://", 1), public_id=public_id)

    def read(self, public_id: str) -> bytes:
        url, _ = cloudinary.utils.cloudinary_url(
            public_id, resource_type=RESOURCE_TYPE, type="upload", secure=True
        )
        logger.debug("Downloading %s from %s", public_id, url)
        try:
            response = httpx.get(url, timeout=self.download_timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Download of %s failed: %s", public_id, exc)
            raise StorageError(f"Could not download {public_id}") from exc
        return response.content

    def delete(self, public_id: str) -> None:
        try:
            cloudinary.uploader.destroy(public_id, resource_type=RESOURCE_TYPE)
        except CloudinaryError as exc:
            logger.error("Cloudinary delete failed for %s: %s", public_id, exc)
            raise StorageError(str(exc)) from exc
