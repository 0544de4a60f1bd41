"""Infrastructure interface exports."""

from .archive_storage import ArchiveStorage
from .downloader import Downloader
from .mail_transport import MailTransport
from .message_broker import MessageBroker, MessagePublisher
from .transcoder import Transcoder
from .transcription_service import TranscriptionService
from .transcription_store import TranscriptionStore

__all__ = [
    "ArchiveStorage",
    "Downloader",
    "MailTransport",
    "MessageBroker",
    "MessagePublisher",
    "Transcoder",
    "TranscriptionService",
    "TranscriptionStore",
]
