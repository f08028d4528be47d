from functools import lru_cache

from study_planner.core.config import get_settings
from study_planner.storage.base import FileStorage
from study_planner.storage.cloudinary_storage import CloudinaryStorage
from study_planner.storage.local import LocalFileStorage


@lru_cache
def get_file_storage() -> FileStorage:
    settings = get_settings()
    if settings.storage_backend == "local":
        return LocalFileStorage(settings.local_storage_dir, base_url=settings.server_url)
    return CloudinaryStorage(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        download_timeout=settings.download_timeout_seconds,
    )
