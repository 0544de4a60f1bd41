"""Application configuration loaded from environment variables."""

import os
import tempfile
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, Field


class QueueConfig(BaseModel, frozen=True):
    """RabbitMQ queue configuration."""

    name: str
    queue_type: str = "quorum"
    max_delivery_count: int = 3
    expected_routing_key: str
    success_routing_key: str
    dlq_name: str
    dlq_exchange_name: str = "dead_letter_exchange"
    dlq_routing_key: str


class RabbitMQConfig(BaseModel, frozen=True):
    """RabbitMQ connection configuration."""

    host: str
    user: str
    password: str
    exchange_name: str = "events"
    queue_config: QueueConfig = QueueConfig(
        name="transcription_request_queue",
        expected_routing_key="transcription.requested",
        success_routing_key="transcription.completed",
        dlq_name="dlq_transcription_requests",
        dlq_routing_key="transcription.failed",
    )


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI API configuration."""

    api_key: str
    boost_param: str = "high"


class ArchiveConfig(BaseModel, frozen=True):
    """MinIO bucket that receives the original audio of finished tasks."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "transcription-audio"
    secure: bool = False
    url_expiry_hours: int = Field(default=168, ge=1, le=168)

    @property
    def url_expiry(self) -> timedelta:
        return timedelta(hours=self.url_expiry_hours)


class PostgresConfig(BaseModel, frozen=True):
    """PostgreSQL connection configuration."""

    host: str
    user: str
    password: str
    port: int
    database: str

    @property
    def url(self) -> str:
        return (
            f"postgresql+psycopg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class EmailConfig(BaseModel, frozen=True):
    """SMTP account used for both completion and failure notifications."""

    username: str
    password: str
    smtp_server: str = "smtp.gmail.com"
    port: int = 587
    use_starttls: bool = True
    timeout_seconds: float = 30.0


class PipelineConfig(BaseModel, frozen=True):
    """Tuning for a single transcription task."""

    work_dir: Path = Path(tempfile.gettempdir())
    max_concurrent_segments: int = Field(default=1, ge=1)
    download_timeout_seconds: float = 60.0
    upload_format: str = "flac"


class AppConfig(BaseModel, frozen=True):
    """
    Root application configuration.

    Optional sections are ``None`` when their service is not configured; the
    matching pipeline stage is then skipped.
    """

    log_level: str = "INFO"
    rabbitmq: RabbitMQConfig
    assemblyai: AssemblyAIConfig
    pipeline: PipelineConfig = PipelineConfig()
    archive: ArchiveConfig | None = None
    postgres: PostgresConfig | None = None
    email: EmailConfig | None = None


def _getbool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    archive = None
    if os.getenv("MINIO_ENDPOINT"):
        archive = ArchiveConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", ""),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_ARCHIVE_BUCKET", "transcription-audio"),
            secure=_getbool("MINIO_SECURE"),
            url_expiry_hours=int(os.getenv("ARCHIVE_URL_EXPIRY_HOURS", "168")),
        )

    postgres = None
    if os.getenv("POSTGRES_HOST"):
        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", ""),
            user=os.getenv("POSTGRES_USER", ""),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", ""),
        )

    email = None
    if os.getenv("EMAIL_USERNAME"):
        email = EmailConfig(
            username=os.getenv("EMAIL_USERNAME", ""),
            password=os.getenv("EMAIL_PASSWORD", ""),
            smtp_server=os.getenv("EMAIL_SMTP_SERVER", "smtp.gmail.com"),
            port=int(os.getenv("EMAIL_PORT", "587")),
            use_starttls=_getbool("EMAIL_USE_STARTTLS", "true"),
        )

    return AppConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        rabbitmq=RabbitMQConfig(
            host=os.getenv("RABBITMQ_HOST", "rabbitmq"),
            user=os.getenv("RABBITMQ_USER", ""),
            password=os.getenv("RABBITMQ_PASSWORD", ""),
        ),
        assemblyai=AssemblyAIConfig(
            api_key=os.getenv("ASSEMBLYAI_API_KEY", ""),
            boost_param=os.getenv("ASSEMBLYAI_BOOST_PARAM", "high"),
        ),
        pipeline=PipelineConfig(
            work_dir=Path(os.getenv("WORK_DIR", tempfile.gettempdir())),
            max_concurrent_segments=int(os.getenv("MAX_CONCURRENT_SEGMENTS", "1")),
            download_timeout_seconds=float(
                os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "60")
            ),
            upload_format=os.getenv("UPLOAD_FORMAT", "flac"),
        ),
        archive=archive,
        postgres=postgres,
        email=email,
    )
