"""Domain models for the transcription pipeline."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class TaskStage(str, Enum):
    """Stages a transcription task moves through, in order."""

    PENDING = "pending"
    DOWNLOADING = "downloading"
    RESAMPLING = "resampling"
    CHUNKING = "chunking"
    EXTRACTING_SEGMENT = "extracting_segment"
    TRANSCRIBING = "transcribing"
    AGGREGATING = "aggregating"
    ARCHIVING = "archiving"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    COMPLETED = "completed"
    FAILED = "failed"


class AudioAsset(BaseModel, frozen=True):
    """An audio file on local disk owned by a running task."""

    path: Path
    byte_size: int = Field(ge=0)

    @classmethod
    def from_path(cls, path: Path | str) -> "AudioAsset":
        path = Path(path)
        return cls(path=path, byte_size=path.stat().st_size)


class Segment(BaseModel, frozen=True):
    """
    A time slice of a resampled asset.

    ``duration_seconds`` is ``None`` when the slice is the whole asset, in
    which case nothing is cut and ``path`` is the asset itself.
    """

    index: int = Field(ge=0)
    start_second: int = Field(default=0, ge=0)
    duration_seconds: int | None = None
    path: Path | None = None

    @property
    def spans_whole_asset(self) -> bool:
        return self.duration_seconds is None


class WordTimestamp(BaseModel, frozen=True):
    """When a recognised word was spoken, in seconds on the segment clock."""

    word: str
    start_time: float
    end_time: float


class WordConfidence(BaseModel, frozen=True):
    """How sure the service is about a recognised word."""

    word: str
    score: float


class KeywordSpot(BaseModel, frozen=True):
    """An occurrence of a requested keyword in a segment."""

    keyword: str
    start_time: float
    end_time: float
    confidence: float


class SegmentResult(BaseModel, frozen=True):
    """The transcription service's answer for one segment."""

    index: int = Field(default=0, ge=0)
    transcript: str
    word_timestamps: tuple[WordTimestamp, ...] = ()
    word_confidences: tuple[WordConfidence, ...] = ()
    keyword_spots: tuple[KeywordSpot, ...] = ()


class AggregatedTranscription(BaseModel, frozen=True):
    """The full transcription of a source file, built once per task."""

    transcript: str
    audio_url: str | None = None
    completed_at: datetime
    timestamps: tuple[WordTimestamp, ...] = ()
    confidences: tuple[WordConfidence, ...] = ()
    keywords: tuple[KeywordSpot, ...] = ()


class Task(BaseModel, frozen=True):
    """One end-to-end transcription request."""

    id: str
    audio_url: str
    recipient_emails: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()


class TranscriptionRequest(BaseModel, frozen=True):
    """Incoming queue message asking for a URL to be transcribed."""

    audio_url: str = Field(min_length=1)
    recipient_emails: list[str] = []
    keywords: list[str] = []
    task_id: str | None = None
