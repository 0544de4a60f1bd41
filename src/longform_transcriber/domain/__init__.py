"""Domain layer exports."""

from .aggregator import TranscriptAggregator
from .artifacts import ArtifactScope
from .cancellation import CancellationToken
from .chunker import TRANSCRIPTION_FORMAT, Chunker, PcmFormat
from .models import (
    AggregatedTranscription,
    AudioAsset,
    KeywordSpot,
    Segment,
    SegmentResult,
    Task,
    TaskStage,
    TranscriptionRequest,
    WordConfidence,
    WordTimestamp,
)
from .segment_extractor import SegmentExtractor

__all__ = [
    "AggregatedTranscription",
    "ArtifactScope",
    "AudioAsset",
    "CancellationToken",
    "Chunker",
    "KeywordSpot",
    "PcmFormat",
    "Segment",
    "SegmentExtractor",
    "SegmentResult",
    "Task",
    "TaskStage",
    "TranscriptAggregator",
    "TranscriptionRequest",
    "TRANSCRIPTION_FORMAT",
    "WordConfidence",
    "WordTimestamp",
]
