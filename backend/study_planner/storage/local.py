from __future__ import annotations

import logging
import uuid
from pathlib import Path, PurePath

from study_planner.storage.base import FileStorage, StorageError, StoredFile

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Keeps uploads on the local disk, for development and tests."""

    def __init__(self, root: str | Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, public_id: str) -> Path:
        path = (self.root / public_id).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Invalid storage key: {public_id}")
        return path

    def upload(
        self, data: bytes, *, filename: str, folder: str, content_type: str | None = None
    ) -> StoredFile:
        public_id = f"{folder}/{uuid.uuid4().hex}_{PurePath(filename).name}"
        path = self._path(public_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored %s at %s", filename, path)
        return StoredFile(url=f"{self.base_url}/files/{public_id}", public_id=public_id)

    def read(self, public_id: str) -> bytes:
        path = self._path(public_id)
        if not path.exists():
            raise StorageError(f"File not found: {public_id}")
        return path.read_bytes()

    def delete(self, public_id: str) -> None:
        self._path(public_id).unlink(missing_ok=True)
