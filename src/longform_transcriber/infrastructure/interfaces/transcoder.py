"""Abstract interface for audio transcoding operations."""

from abc import ABC, abstractmethod
from pathlib import Path


class Transcoder(ABC):
    """Abstract base class for re-encoding and cutting audio files."""

    @abstractmethod
    def resample(self, path: Path) -> Path:
        """
        Re-encodes ``path`` as 16 kHz mono 16-bit WAV next to the original.

        Raises:
            TranscodeError: If the external tool fails.
        """

    @abstractmethod
    def extract(self, path: Path, start_second: int, duration_seconds: int) -> Path:
        """
        Writes ``[start_second, start_second + duration_seconds)`` of ``path``
        to a new file in the same directory and format.

        Raises:
            TranscodeError: If the external tool fails.
        """

    @abstractmethod
    def convert(self, path: Path, extension: str) -> Path:
        """
        Re-encodes ``path`` into the container named by ``extension``,
        keeping the transcription sample rate and channel count.

        Raises:
            TranscodeError: If the external tool fails.
        """
