"""Abstract interface for fetching source audio."""

from abc import ABC, abstractmethod
from pathlib import Path


class Downloader(ABC):
    """Abstract base class for retrieving remote audio files."""

    @abstractmethod
    def fetch(self, url: str, directory: Path) -> Path:
        """
        Downloads the file at ``url`` into ``directory``.

        Args:
            url: Location of the source audio.
            directory: Task-scoped directory that receives the file.

        Returns:
            Path of the downloaded file. Its name is unique per call.

        Raises:
            DownloadError: On network or filesystem errors.
        """
