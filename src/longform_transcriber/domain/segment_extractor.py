"""Materializes planned segments as standalone audio files."""

import logging

from longform_transcriber.exceptions import ExtractionError, TranscodeError
from longform_transcriber.infrastructure.interfaces.transcoder import Transcoder

from .models import AudioAsset, Segment

logger = logging.getLogger(__name__)


class SegmentExtractor:
    """Cuts planned segments out of a resampled asset with the transcoder."""

    def __init__(self, transcoder: Transcoder):
        self._transcoder = transcoder

    def materialize(self, source: AudioAsset, segment: Segment) -> Segment:
        """
        Produces the file for ``segment``.

        A whole-asset segment is returned pointing at ``source`` without
        touching the transcoder; the caller must not delete that path.

        Raises:
            ExtractionError: If the transcoder fails to cut the segment.
        """
        if segment.spans_whole_asset:
            return segment.model_copy(update={"path": source.path})

        try:
            path = self._transcoder.extract(
                source.path, segment.start_second, segment.duration_seconds
            )
        except TranscodeError as e:
            raise ExtractionError(segment.index, e.diagnostic, cause=e) from e

        logger.info(
            "Segment extracted",
            extra={
                "segment_index": segment.index,
                "start_second": segment.start_second,
                "duration_seconds": segment.duration_seconds,
            },
        )
        return segment.model_copy(update={"path": path})
