"""moviepy (ffmpeg) implementation of the Transcoder interface."""

import logging
from pathlib import Path

from moviepy import AudioFileClip

from longform_transcriber.domain.chunker import TRANSCRIPTION_FORMAT, PcmFormat
from longform_transcriber.exceptions import TranscodeError

from .interfaces import Transcoder

logger = logging.getLogger(__name__)

_CODECS = {
    "wav": "pcm_s16le",
    "flac": "flac",
}


class MoviepyTranscoder(Transcoder):
    """
    Re-encodes and cuts audio through moviepy, which drives ffmpeg.

    Every file written uses ``audio_format``, the same format the chunker
    derives its segment duration from. ffmpeg's error output reaches the
    raised TranscodeError through moviepy's exception text.
    """

    def __init__(self, audio_format: PcmFormat = TRANSCRIPTION_FORMAT):
        self._format = audio_format

    def resample(self, path: Path) -> Path:
        output = path.with_name(path.name + ".wav")
        self._write(path, output)
        logger.info(
            "Audio resampled",
            extra={"source": str(path), "output": str(output)},
        )
        return output

    def extract(self, path: Path, start_second: int, duration_seconds: int) -> Path:
        output = path.with_name(f"{start_second}s_{path.name}")
        self._write(path, output, start_second, duration_seconds)
        return output

    def convert(self, path: Path, extension: str) -> Path:
        output = path.with_name(f"{path.name}.{extension.lstrip('.')}")
        self._write(path, output)
        return output

    def _write(
        self,
        source: Path,
        output: Path,
        start_second: int | None = None,
        duration_seconds: int | None = None,
    ) -> None:
        extension = output.suffix.lstrip(".").lower()
        output.unlink(missing_ok=True)
        try:
            with AudioFileClip(str(source)) as clip:
                if start_second is not None:
                    end = min(start_second + duration_seconds, clip.duration)
                    clip = clip.subclipped(start_second, end)
                clip.write_audiofile(
                    str(output),
                    fps=self._format.sample_rate_hz,
                    nbytes=self._format.bytes_per_sample,
                    codec=_CODECS.get(extension),
                    ffmpeg_params=["-ac", str(self._format.channels)],
                    logger=None,
                )
        except Exception as e:
            logger.exception(
                "Transcoding failed",
                extra={"source": str(source), "output": str(output)},
            )
            output.unlink(missing_ok=True)
            raise TranscodeError(source, e) from e
