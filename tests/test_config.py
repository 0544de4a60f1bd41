from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from longform_transcriber.config import ArchiveConfig, PipelineConfig, load_config

OPTIONAL_VARS = ("MINIO_ENDPOINT", "POSTGRES_HOST", "EMAIL_USERNAME")


@pytest.fixture
def base_env(monkeypatch):
    for name in OPTIONAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RABBITMQ_HOST", "mq")
    monkeypatch.setenv("RABBITMQ_USER", "guest")
    monkeypatch.setenv("RABBITMQ_PASSWORD", "secret")
    monkeypatch.setenv("ASSEMBLYAI_API_KEY", "key")
    return monkeypatch


def test_optional_services_are_off_by_default(base_env):
    config = load_config()

    assert config.rabbitmq.host == "mq"
    assert config.assemblyai.api_key == "key"
    assert config.archive is None
    assert config.postgres is None
    assert config.email is None


def test_queue_defaults(base_env):
    queue = load_config().rabbitmq.queue_config

    assert queue.name == "transcription_request_queue"
    assert queue.expected_routing_key == "transcription.requested"
    assert queue.success_routing_key == "transcription.completed"
    assert queue.queue_type == "quorum"


def test_optional_services_are_loaded_when_configured(base_env):
    base_env.setenv("MINIO_ENDPOINT", "minio:9000")
    base_env.setenv("MINIO_SECURE", "true")
    base_env.setenv("ARCHIVE_URL_EXPIRY_HOURS", "24")
    base_env.setenv("POSTGRES_HOST", "db")
    base_env.setenv("POSTGRES_USER", "app")
    base_env.setenv("POSTGRES_PASSWORD", "pw")
    base_env.setenv("POSTGRES_DB", "transcriptions")
    base_env.setenv("EMAIL_USERNAME", "bot@example.com")
    base_env.setenv("EMAIL_USE_STARTTLS", "no")

    config = load_config()

    assert config.archive.endpoint == "minio:9000"
    assert config.archive.secure is True
    assert config.archive.url_expiry == timedelta(hours=24)
    assert config.postgres.url == "postgresql+psycopg://app:pw@db:5432/transcriptions"
    assert config.email.username == "bot@example.com"
    assert config.email.port == 587
    assert config.email.use_starttls is False


def test_pipeline_settings(base_env, tmp_path):
    base_env.setenv("WORK_DIR", str(tmp_path))
    base_env.setenv("MAX_CONCURRENT_SEGMENTS", "4")
    base_env.setenv("UPLOAD_FORMAT", "wav")

    pipeline = load_config().pipeline

    assert pipeline.work_dir == Path(tmp_path)
    assert pipeline.max_concurrent_segments == 4
    assert pipeline.upload_format == "wav"


def test_concurrency_must_be_positive():
    with pytest.raises(ValidationError):
        PipelineConfig(max_concurrent_segments=0)


def test_presigned_url_expiry_is_capped_at_a_week():
    with pytest.raises(ValidationError):
        ArchiveConfig(endpoint="minio:9000", user="u", password="p", url_expiry_hours=169)


def test_log_level_is_read_from_the_environment(base_env):
    base_env.setenv("LOG_LEVEL", "DEBUG")

    assert load_config().log_level == "DEBUG"
