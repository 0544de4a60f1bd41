"""SQLModel implementation of the TranscriptionStore interface."""

import logging

from longform_transcriber.db_models import TranscriptionRecord
from longform_transcriber.domain.models import AggregatedTranscription
from longform_transcriber.exceptions import PersistenceError

from .interfaces import TranscriptionStore

logger = logging.getLogger(__name__)


class SqlTranscriptionStore(TranscriptionStore):
    """
    Writes finished transcriptions to the ``transcriptions`` table.

    Word timings, confidences and keyword spots are stored as JSON documents
    so a record reads back exactly as it was aggregated.
    """

    def __init__(self, session_factory):
        """
        Initializes the store.

        Args:
            session_factory: Callable that returns a SQLModel Session context manager.
        """
        self._session_factory = session_factory

    def persist(self, task_id: str, transcription: AggregatedTranscription) -> None:
        document = transcription.model_dump(mode="json")
        record = TranscriptionRecord(
            task_id=task_id,
            transcript=transcription.transcript,
            audio_url=transcription.audio_url,
            completed_at=transcription.completed_at,
            timestamps=document["timestamps"],
            confidences=document["confidences"],
            keywords=document["keywords"],
        )
        try:
            with self._session_factory() as db_session:
                db_session.merge(record)
                db_session.commit()
        except Exception as e:
            logger.exception(
                "Failed to persist transcription", extra={"task_id": task_id}
            )
            raise PersistenceError(task_id, cause=e) from e

        logger.info("Transcription persisted", extra={"task_id": task_id})
