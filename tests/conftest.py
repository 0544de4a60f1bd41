import threading
import time
from pathlib import Path

import pytest

from longform_transcriber.config import PipelineConfig
from longform_transcriber.domain import Chunker, PcmFormat, SegmentResult, WordTimestamp
from longform_transcriber.exceptions import (
    ArchiveError,
    DownloadError,
    NotificationError,
    PersistenceError,
    TranscodeError,
    TranscriptionError,
)
from longform_transcriber.handlers import TranscriptionTaskHandler
from longform_transcriber.infrastructure.interfaces import (
    ArchiveStorage,
    Downloader,
    MailTransport,
    Transcoder,
    TranscriptionService,
    TranscriptionStore,
)

# 10 bytes per second and a 100 byte ceiling: 10 second segments.
SMALL_FORMAT = PcmFormat(sample_rate_hz=10, channels=1, bytes_per_sample=1)


class FakeDownloader(Downloader):
    def __init__(self, content: bytes = b"mp3-bytes", fail: bool = False):
        self.content = content
        self.fail = fail
        self.calls = []

    def fetch(self, url: str, directory: Path) -> Path:
        self.calls.append(url)
        if self.fail:
            raise DownloadError(url, ConnectionError("connection refused"))
        path = directory / f"{time.time_ns()}-source.mp3"
        path.write_bytes(self.content)
        return path


class FakeTranscoder(Transcoder):
    """Writes placeholder files; the resampled file has ``resampled_size`` bytes."""

    def __init__(
        self,
        resampled_size: int = 50,
        fail_extract_at: int | None = None,
        extract_delays: dict[int, float] | None = None,
    ):
        self.resampled_size = resampled_size
        self.fail_extract_at = fail_extract_at
        self.extract_delays = extract_delays or {}
        self.extract_calls = []
        self.convert_calls = []

    def resample(self, path: Path) -> Path:
        output = path.with_name(path.name + ".wav")
        output.write_bytes(b"\0" * self.resampled_size)
        return output

    def extract(self, path: Path, start_second: int, duration_seconds: int) -> Path:
        self.extract_calls.append((start_second, duration_seconds))
        time.sleep(self.extract_delays.get(start_second, 0))
        if start_second == self.fail_extract_at:
            raise TranscodeError(path, RuntimeError("Invalid duration specification"))
        output = path.with_name(f"{start_second}s_{path.name}")
        output.write_bytes(b"segment")
        return output

    def convert(self, path: Path, extension: str) -> Path:
        self.convert_calls.append((path.name, extension))
        output = path.with_name(f"{path.name}.{extension}")
        output.write_bytes(b"flac")
        return output


def segment_label(path: Path) -> str:
    """``<8s>`` for a file cut at second 8, ``<whole>`` for the full asset."""
    head = path.name.split("_")[0]
    return f"<{head}>" if head.endswith("s") and head[:-1].isdigit() else "<whole>"


class FakeTranscriptionService(TranscriptionService):
    def __init__(
        self,
        fail_on_call: int | None = None,
        delays: dict[str, float] | None = None,
        on_call=None,
    ):
        self.fail_on_call = fail_on_call
        self.delays = delays or {}
        self.on_call = on_call
        self.calls = []
        self._lock = threading.Lock()

    def transcribe(self, path: Path, keywords) -> SegmentResult:
        label = segment_label(path)
        with self._lock:
            call_number = len(self.calls)
            self.calls.append(
                {
                    "label": label,
                    "existed": path.exists(),
                    "keywords": tuple(keywords),
                    "siblings": sorted(p.name for p in path.parent.iterdir()),
                }
            )
        if self.on_call is not None:
            self.on_call(call_number)
        time.sleep(self.delays.get(label, 0))
        if call_number == self.fail_on_call:
            raise TranscriptionError(path.name, RuntimeError("service unavailable"))
        return SegmentResult(
            transcript=label,
            word_timestamps=(WordTimestamp(word=label, start_time=0.0, end_time=1.0),),
        )


class FakeMailer(MailTransport):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, recipients, subject: str, body: str) -> None:
        if self.fail:
            raise NotificationError(list(recipients), OSError("smtp down"))
        self.sent.append({"recipients": list(recipients), "subject": subject, "body": body})


class FakeArchive(ArchiveStorage):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads = []

    def upload(self, path: Path, task_id: str) -> str:
        if self.fail:
            raise ArchiveError(f"{task_id}/{path.name}", OSError("bucket unreachable"))
        self.uploads.append(path.name)
        return f"https://archive.example/{task_id}/{path.name}"

    def ensure_bucket_exists(self) -> None:
        pass


class FakeStore(TranscriptionStore):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.saved = {}

    def persist(self, task_id, transcription) -> None:
        if self.fail:
            raise PersistenceError(task_id, RuntimeError("connection reset"))
        self.saved[task_id] = transcription


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def small_chunker():
    return Chunker(max_chunk_bytes=100, overlap_seconds=2, audio_format=SMALL_FORMAT)


@pytest.fixture
def make_handler(work_dir, small_chunker):
    """Builds a handler over fakes; any collaborator can be overridden."""

    def _make(
        downloader=None,
        transcoder=None,
        transcription_service=None,
        archive=None,
        store=None,
        mailer=None,
        max_concurrent_segments=1,
    ):
        return TranscriptionTaskHandler(
            downloader=downloader or FakeDownloader(),
            transcoder=transcoder or FakeTranscoder(),
            transcription_service=transcription_service or FakeTranscriptionService(),
            config=PipelineConfig(
                work_dir=work_dir, max_concurrent_segments=max_concurrent_segments
            ),
            chunker=small_chunker,
            archive=archive,
            store=store,
            mailer=mailer,
        )

    return _make
