"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from longform_transcriber.domain.models import SegmentResult


class TranscriptionService(ABC):
    """Abstract base class for audio transcription backends."""

    @abstractmethod
    def transcribe(self, path: Path, keywords: Sequence[str]) -> SegmentResult:
        """
        Transcribes one segment file.

        Args:
            path: Audio file no larger than the service's request limit.
            keywords: Words or phrases to boost and report when spotted.

        Returns:
            SegmentResult with transcript, word timings, confidences and
            keyword spots. Its ``index`` is left for the caller to set.

        Raises:
            TranscriptionError: If transcription fails.
        """
