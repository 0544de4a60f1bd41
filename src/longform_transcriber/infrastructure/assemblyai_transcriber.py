"""AssemblyAI implementation of the TranscriptionService interface."""

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import assemblyai as aai

from longform_transcriber.domain.models import (
    KeywordSpot,
    SegmentResult,
    WordConfidence,
    WordTimestamp,
)
from longform_transcriber.exceptions import TranscriptionError

from .interfaces import TranscriptionService

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w']+")


def _normalize(token: str) -> str:
    return _NON_WORD.sub("", token.lower())


def spot_keywords(words: Sequence, keywords: Sequence[str]) -> list[KeywordSpot]:
    """
    Finds every occurrence of each keyword phrase in the recognised words.

    Matching ignores case and punctuation. A multi-word keyword matches a run
    of consecutive words; its spot spans from the first word's start to the
    last word's end and carries the lowest confidence among them.
    """
    tokens = [_normalize(w.text) for w in words]
    spots = []
    for keyword in keywords:
        phrase = [_normalize(part) for part in keyword.split()]
        phrase = [part for part in phrase if part]
        if not phrase:
            continue
        for i in range(len(tokens) - len(phrase) + 1):
            if tokens[i : i + len(phrase)] != phrase:
                continue
            matched = words[i : i + len(phrase)]
            spots.append(
                KeywordSpot(
                    keyword=keyword,
                    start_time=matched[0].start / 1000,
                    end_time=matched[-1].end / 1000,
                    confidence=min(w.confidence for w in matched),
                )
            )
    spots.sort(key=lambda spot: spot.start_time)
    return spots


class AssemblyAITranscriber(TranscriptionService):
    """Handles audio transcription using AssemblyAI."""

    def __init__(self, transcriber: aai.Transcriber, boost_param: str = "high"):
        self._transcriber = transcriber
        self._boost_param = aai.WordBoost(boost_param)

    def transcribe(self, path: Path, keywords: Sequence[str]) -> SegmentResult:
        """
        Transcribes a segment file using AssemblyAI.

        Keywords are sent as word boost hints. AssemblyAI reports times in
        milliseconds; they are converted to seconds.
        """
        config = None
        if keywords:
            config = aai.TranscriptionConfig(
                word_boost=list(keywords),
                boost_param=self._boost_param,
            )

        try:
            transcript = self._transcriber.transcribe(str(path), config=config)

            if transcript.status == aai.TranscriptStatus.error:
                raise TranscriptionError(path.name, Exception(transcript.error))

            if transcript.text is None:
                raise TranscriptionError(
                    path.name, Exception("Transcription returned no text")
                )

        except TranscriptionError:
            logger.error(
                "AssemblyAI returned an error", extra={"file_name": path.name}
            )
            raise
        except Exception as e:
            logger.exception("AssemblyAI transcription failed")
            raise TranscriptionError(path.name, e) from e

        words = transcript.words or []
        result = SegmentResult(
            transcript=transcript.text,
            word_timestamps=tuple(
                WordTimestamp(word=w.text, start_time=w.start / 1000, end_time=w.end / 1000)
                for w in words
            ),
            word_confidences=tuple(
                WordConfidence(word=w.text, score=w.confidence) for w in words
            ),
            keyword_spots=tuple(spot_keywords(words, keywords)),
        )

        logger.info(
            "Audio transcription successful",
            extra={
                "file_name": path.name,
                "word_count": len(words),
                "keyword_spots": len(result.keyword_spots),
            },
        )
        return result
