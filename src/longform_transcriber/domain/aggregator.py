"""Core business logic for merging per-segment transcriptions."""

from collections.abc import Iterable
from datetime import datetime, timezone
from itertools import chain

from .models import AggregatedTranscription, SegmentResult


class TranscriptAggregator:
    """Builds one transcription out of the results of every segment."""

    def merge(self, results: Iterable[SegmentResult]) -> AggregatedTranscription:
        """
        Merges segment results in ascending segment order.

        Results may arrive in any order; they are sorted by ``index`` first.
        Transcripts are concatenated as returned by the service and word data
        keeps each segment's own clock, so words inside the overlap window
        appear twice.

        Args:
            results: One result per planned segment.

        Returns:
            AggregatedTranscription stamped with the current UTC time.
        """
        ordered = sorted(results, key=lambda result: result.index)

        return AggregatedTranscription(
            transcript="".join(result.transcript for result in ordered),
            completed_at=datetime.now(timezone.utc),
            timestamps=tuple(
                chain.from_iterable(result.word_timestamps for result in ordered)
            ),
            confidences=tuple(
                chain.from_iterable(result.word_confidences for result in ordered)
            ),
            keywords=tuple(
                chain.from_iterable(result.keyword_spots for result in ordered)
            ),
        )
