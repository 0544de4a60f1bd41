"""Dependency injection configuration for the transcription worker."""

import logging
from contextlib import contextmanager

import assemblyai as aai
import httpx
import pika
from minio import Minio
from sqlmodel import Session, SQLModel, create_engine

from longform_transcriber.config import AppConfig
from longform_transcriber.handlers import TranscriptionTaskHandler
from longform_transcriber.infrastructure import (
    AssemblyAITranscriber,
    HttpDownloader,
    MinioArchiveStorage,
    MoviepyTranscoder,
    RabbitMQBroker,
    SmtpMailTransport,
    SqlTranscriptionStore,
)
from longform_transcriber.infrastructure.interfaces import (
    ArchiveStorage,
    MailTransport,
    TranscriptionStore,
)
from longform_transcriber.worker import Worker

logger = logging.getLogger(__name__)


def build_archive(config: AppConfig) -> ArchiveStorage | None:
    """Returns the MinIO archive, or None when archiving is not configured."""
    if config.archive is None:
        return None
    client = Minio(
        endpoint=config.archive.endpoint,
        access_key=config.archive.user,
        secret_key=config.archive.password,
        secure=config.archive.secure,
    )
    archive = MinioArchiveStorage(
        client, config.archive.bucket_name, config.archive.url_expiry
    )
    archive.ensure_bucket_exists()
    return archive


def build_store(config: AppConfig) -> TranscriptionStore | None:
    """Returns the database store, or None when persistence is not configured."""
    if config.postgres is None:
        return None
    engine = create_engine(config.postgres.url)
    SQLModel.metadata.create_all(engine)
    logger.info("Database initialized", extra={"host": config.postgres.host})

    @contextmanager
    def session_factory():
        """Creates a database session context manager."""
        with Session(engine) as session:
            yield session

    return SqlTranscriptionStore(session_factory)


def build_mailer(config: AppConfig) -> MailTransport | None:
    """Returns the SMTP transport, or None when email is not configured."""
    if config.email is None:
        return None
    return SmtpMailTransport(config.email)


def build_handler(config: AppConfig) -> TranscriptionTaskHandler:
    """Wires the transcription pipeline from ``config``."""
    http_client = httpx.Client(
        timeout=config.pipeline.download_timeout_seconds,
        follow_redirects=True,
    )

    aai.settings.api_key = config.assemblyai.api_key
    transcriber = AssemblyAITranscriber(
        aai.Transcriber(), boost_param=config.assemblyai.boost_param
    )

    return TranscriptionTaskHandler(
        downloader=HttpDownloader(http_client),
        transcoder=MoviepyTranscoder(),
        transcription_service=transcriber,
        config=config.pipeline,
        archive=build_archive(config),
        store=build_store(config),
        mailer=build_mailer(config),
    )


def build_worker(config: AppConfig) -> Worker:
    """Connects to RabbitMQ and returns a worker ready to consume."""
    credentials = pika.PlainCredentials(config.rabbitmq.user, config.rabbitmq.password)
    parameters = pika.ConnectionParameters(
        host=config.rabbitmq.host,
        credentials=credentials,
        heartbeat=0,
    )
    rabbit_connection = pika.BlockingConnection(parameters)
    rabbit_channel = rabbit_connection.channel()

    broker = RabbitMQBroker(rabbit_channel, config.rabbitmq)
    broker.setup()

    return Worker(broker, build_handler(config), config.rabbitmq)
