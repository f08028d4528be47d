from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class StorageError(Exception):
    """Raised when the file store rejects or cannot serve a request."""


@dataclass(frozen=True)
class StoredFile:
    url: str
    public_id: str


class FileStorage(ABC):
    """Interface for the external file store holding uploaded notes."""

    @abstractmethod
    def upload(
        self, data: bytes, *, filename: str, folder: str, content_type: str | None = None
    ) -> StoredFile:
        """Store ``data`` and return its public URL and storage key."""

    @abstractmethod
    def read(self, public_id: str) -> bytes:
        """Return the stored bytes for ``public_id``."""

    @abstractmethod
    def delete(self, public_id: str) -> None:
        """Remove the object; a missing object is not an error."""
