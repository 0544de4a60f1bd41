"""Splits oversized audio into segments the transcription service accepts."""

from pydantic import BaseModel, Field

from .models import Segment

SAMPLE_RATE_HZ = 16_000
CHANNELS = 1
BYTES_PER_SAMPLE = 2

# Per-request ceiling of the transcription service, with headroom for headers.
MAX_CHUNK_BYTES = 95_000_000
OVERLAP_SECONDS = 5


class PcmFormat(BaseModel, frozen=True):
    """Uncompressed PCM layout of the files the pipeline measures and cuts."""

    sample_rate_hz: int = Field(gt=0)
    channels: int = Field(gt=0)
    bytes_per_sample: int = Field(gt=0)

    @property
    def byte_rate(self) -> int:
        """Bytes of audio per second."""
        return self.sample_rate_hz * self.channels * self.bytes_per_sample


# Shared with the transcoder so segment durations and resampling never disagree.
TRANSCRIPTION_FORMAT = PcmFormat(
    sample_rate_hz=SAMPLE_RATE_HZ,
    channels=CHANNELS,
    bytes_per_sample=BYTES_PER_SAMPLE,
)


class Chunker:
    """
    Plans overlapping segments from the byte size of a resampled file.

    The segment duration is fixed when the chunker is built: it is how many
    seconds of ``audio_format`` fit in ``max_chunk_bytes``. For the reference
    16 kHz mono 16-bit format that is 95,000,000 // 32,000 = 2968 seconds.
    """

    def __init__(
        self,
        max_chunk_bytes: int = MAX_CHUNK_BYTES,
        overlap_seconds: int = OVERLAP_SECONDS,
        audio_format: PcmFormat = TRANSCRIPTION_FORMAT,
    ):
        if max_chunk_bytes <= 0:
            raise ValueError("max_chunk_bytes must be positive")
        self.max_chunk_bytes = max_chunk_bytes
        self.overlap_seconds = overlap_seconds
        self.chunk_duration_seconds = max_chunk_bytes // audio_format.byte_rate
        if self.chunk_duration_seconds <= overlap_seconds:
            raise ValueError("Chunk duration must be longer than the overlap")

    def num_chunks(self, byte_size: int) -> int:
        """
        Number of segments needed for a file of ``byte_size`` bytes.

        Always at least one. A file that is an exact multiple of the ceiling
        still gets an extra chunk so the overlap never spills past the limit.
        """
        if byte_size < 0:
            raise ValueError(f"byte_size must not be negative, got {byte_size}")
        return byte_size // self.max_chunk_bytes + 1

    def plan(self, byte_size: int) -> list[Segment]:
        """
        Returns the ordered segments for a file of ``byte_size`` bytes.

        Args:
            byte_size: Size of the resampled file.

        Returns:
            A single whole-asset segment when the file fits in one request,
            otherwise fixed-length segments where every segment after the
            first starts ``overlap_seconds`` early.
        """
        count = self.num_chunks(byte_size)
        if count == 1:
            return [Segment(index=0)]

        segments = []
        for index in range(count):
            start = index * self.chunk_duration_seconds
            if index > 0:
                start -= self.overlap_seconds
            segments.append(
                Segment(
                    index=index,
                    start_second=start,
                    duration_seconds=self.chunk_duration_seconds,
                )
            )
        return segments
