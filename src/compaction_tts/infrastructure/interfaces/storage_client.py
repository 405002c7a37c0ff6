"""Abstract interface for object storage operations."""

from abc import ABC, abstractmethod
from typing import BinaryIO


class StorageClient(ABC):
    """Abstract base class for file storage backends."""

    @abstractmethod
    def upload(
        self,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
        cache_control: str | None = None,
    ) -> None:
        """
        Uploads a file to storage, replacing any existing object.

        Args:
            object_name: The destination path/name in storage.
            data: File-like object containing the data.
            size: Size of the file in bytes.
            content_type: MIME type of the file.
            cache_control: Optional Cache-Control header stored with the object.

        Raises:
            StorageError: If the upload fails.
        """

    @abstractmethod
    def make_public(self, object_name: str) -> None:
        """
        Grants anonymous read access to an object.

        Raises:
            StorageError: If the access change fails.
        """

    @abstractmethod
    def public_url(self, object_name: str) -> str:
        """Returns the URL an object is publicly served from."""

    @abstractmethod
    def exists(self, object_name: str) -> bool:
        """Returns whether an object exists."""

    @abstractmethod
    def delete(self, object_name: str) -> None:
        """Deletes an object; deleting a missing object is not an error."""
