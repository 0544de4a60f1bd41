"""Infrastructure layer exports."""

from .assemblyai_transcriber import AssemblyAITranscriber
from .http_downloader import HttpDownloader
from .minio_archive import MinioArchiveStorage
from .moviepy_transcoder import MoviepyTranscoder
from .rabbitmq_broker import RabbitMQBroker
from .smtp_mail import SmtpMailTransport
from .sql_store import SqlTranscriptionStore

__all__ = [
    "AssemblyAITranscriber",
    "HttpDownloader",
    "MinioArchiveStorage",
    "MoviepyTranscoder",
    "RabbitMQBroker",
    "SmtpMailTransport",
    "SqlTranscriptionStore",
]
