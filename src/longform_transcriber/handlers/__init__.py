"""Handler layer exports."""

from .tasks import make_transcription_task
from .transcription_handler import TranscriptionTaskHandler

__all__ = ["TranscriptionTaskHandler", "make_transcription_task"]
