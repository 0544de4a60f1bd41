"""Abstract interface for archiving source audio."""

from abc import ABC, abstractmethod
from pathlib import Path


class ArchiveStorage(ABC):
    """Abstract base class for object storage that keeps original audio."""

    @abstractmethod
    def upload(self, path: Path, task_id: str) -> str:
        """
        Uploads ``path`` and returns a URL it can be downloaded from.

        Raises:
            ArchiveError: If the upload fails.
        """

    @abstractmethod
    def ensure_bucket_exists(self) -> None:
        """Creates the archive bucket if it is missing."""
