"""
Long-form Transcriber Service.

Entry point for the transcription worker. It handles:
- Consuming transcription requests from RabbitMQ.
- Splitting long audio into segments AssemblyAI accepts.
- Archiving audio in MinIO and saving transcripts to PostgreSQL when configured.
- Emailing the transcript, or the error, to the requesters.
- Distributed tracing with Datadog.
- Structured JSON logging.
"""

import signal

from ddtrace import patch_all

from longform_transcriber.config import load_config
from longform_transcriber.dependencies import build_worker
from longform_transcriber.logging import setup_logging

patch_all()


def main():
    """Starts the worker and stops it cleanly on SIGTERM or SIGINT."""
    config = load_config()
    logger = setup_logging(config.log_level)
    worker = build_worker(config)

    def _shutdown(signum, frame):
        logger.info("Shutdown signal received", extra={"signal": signum})
        worker.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)
    worker.start()


if __name__ == "__main__":
    main()
