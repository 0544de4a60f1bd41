"""Abstract interface for persisting finished transcriptions."""

from abc import ABC, abstractmethod

from longform_transcriber.domain.models import AggregatedTranscription


class TranscriptionStore(ABC):
    """Abstract base class for transcription databases."""

    @abstractmethod
    def persist(self, task_id: str, transcription: AggregatedTranscription) -> None:
        """
        Saves ``transcription`` under ``task_id``, replacing any earlier record.

        Raises:
            PersistenceError: If the write fails.
        """
