from pathlib import Path

import pytest

from longform_transcriber.domain import PcmFormat
from longform_transcriber.exceptions import TranscodeError
from longform_transcriber.infrastructure import moviepy_transcoder
from longform_transcriber.infrastructure.moviepy_transcoder import MoviepyTranscoder


class FakeClip:
    """Stands in for moviepy's AudioFileClip and records what was written."""

    opened = []
    fail_with = None

    def __init__(self, filename, duration=100.0, subclip=None):
        self.filename = filename
        self.duration = duration
        self.subclip = subclip
        self.closed = False
        if subclip is None:
            FakeClip.opened.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def subclipped(self, start, end):
        self.subclipped_at = (start, end)
        return FakeClip(self.filename, end - start, subclip=(start, end))

    def write_audiofile(self, filename, **kwargs):
        self.written = (filename, kwargs)
        if FakeClip.fail_with is not None:
            Path(filename).write_bytes(b"partial")
            raise FakeClip.fail_with
        Path(filename).write_bytes(b"audio")


@pytest.fixture(autouse=True)
def fake_clip(monkeypatch):
    FakeClip.opened = []
    FakeClip.fail_with = None
    monkeypatch.setattr(moviepy_transcoder, "AudioFileClip", FakeClip)
    return FakeClip


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "123-talk.mp3"
    path.write_bytes(b"mp3")
    return path


def test_resample_writes_mono_16khz_pcm(source):
    output = MoviepyTranscoder().resample(source)

    assert output.name == "123-talk.mp3.wav"
    assert output.exists()
    clip = FakeClip.opened[0]
    assert clip.closed
    filename, options = clip.written
    assert filename == str(output)
    assert options["fps"] == 16_000
    assert options["nbytes"] == 2
    assert options["codec"] == "pcm_s16le"
    assert options["ffmpeg_params"] == ["-ac", "1"]


def test_extract_cuts_a_window_named_after_its_start(source):
    output = MoviepyTranscoder().extract(source, 40, 30)

    assert output.name == "40s_123-talk.mp3"
    assert FakeClip.opened[0].subclipped_at == (40, 70)


def test_extract_stops_at_the_end_of_the_audio(source):
    MoviepyTranscoder().extract(source, 90, 30)

    assert FakeClip.opened[0].subclipped_at == (90, 100.0)


def test_convert_uses_the_extension_codec(source):
    output = MoviepyTranscoder(PcmFormat(sample_rate_hz=8000, channels=2, bytes_per_sample=2)).convert(
        source, ".flac"
    )

    assert output.name == "123-talk.mp3.flac"
    _, options = FakeClip.opened[0].written
    assert options["codec"] == "flac"
    assert options["fps"] == 8000
    assert options["ffmpeg_params"] == ["-ac", "2"]


def test_failure_removes_the_partial_output(source):
    FakeClip.fail_with = OSError("ffmpeg: Invalid data found when processing input")

    with pytest.raises(TranscodeError) as excinfo:
        MoviepyTranscoder().resample(source)

    assert "Invalid data found" in excinfo.value.diagnostic
    assert excinfo.value.path == source
    assert not source.with_name("123-talk.mp3.wav").exists()
