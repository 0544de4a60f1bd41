"""Worker that handles queue message consumption and orchestration."""

import json
import logging
import threading
import uuid
from typing import Any

from pydantic import ValidationError

from longform_transcriber.config import RabbitMQConfig
from longform_transcriber.domain import CancellationToken, TranscriptionRequest
from longform_transcriber.exceptions import EventPublishError
from longform_transcriber.handlers import (
    TranscriptionTaskHandler,
    make_transcription_task,
)
from longform_transcriber.infrastructure.interfaces import MessageBroker

logger = logging.getLogger(__name__)


class Worker:
    """Consumes transcription requests from the queue and runs them as tasks."""

    def __init__(
        self,
        broker: MessageBroker,
        handler: TranscriptionTaskHandler,
        config: RabbitMQConfig,
    ):
        self._broker = broker
        self._handler = handler
        self._config = config
        self._lock = threading.Lock()
        self._current_token: CancellationToken | None = None
        self._stopping = False

    def start(self) -> None:
        """Starts consuming messages from the queue."""
        logger.info("Worker initialized, starting message consumption")
        self._broker.consume(self._on_message)

    def stop(self) -> None:
        """Cancels the in-flight task, if any, and stops consuming."""
        with self._lock:
            self._stopping = True
            if self._current_token is not None:
                self._current_token.cancel()
        logger.info("Worker stopping")
        self._broker.stop()

    def _on_message(
        self, body: bytes, delivery_tag: int, headers: dict[str, Any] | None
    ) -> None:
        """Callback for each received message."""
        delivery_count = headers.get("x-delivery-count", 1) if headers else 1

        logger.info(
            "Message received",
            extra={
                "attempt": delivery_count,
                "max_attempts": self._config.queue_config.max_delivery_count,
            },
        )

        try:
            request = TranscriptionRequest.model_validate(json.loads(body))
        except (ValidationError, ValueError) as e:
            logger.exception("Invalid message format", extra={"error": str(e)})
            self._broker.reject(delivery_tag)
            return

        task_id = request.task_id or str(uuid.uuid4())
        token = CancellationToken()
        with self._lock:
            if self._stopping:
                token.cancel()
            self._current_token = token

        run, on_failure = make_transcription_task(
            self._handler,
            request.audio_url,
            request.recipient_emails,
            request.keywords,
            cancel_token=token,
        )

        try:
            run(task_id)
        except Exception as e:
            logger.exception(
                "Message processing failed",
                extra={"task_id": task_id, "audio_url": request.audio_url},
            )
            try:
                on_failure(task_id, str(e))
            finally:
                self._broker.reject(delivery_tag)
            return
        finally:
            with self._lock:
                self._current_token = None

        self._broker.acknowledge(delivery_tag)

        try:
            self._broker.publish(
                routing_key=self._config.queue_config.success_routing_key,
                payload={"task_id": task_id, "audio_url": request.audio_url},
            )
        except EventPublishError:
            logger.exception(
                "Completion event not published", extra={"task_id": task_id}
            )

        logger.info(
            "Message processed successfully",
            extra={"task_id": task_id, "audio_url": request.audio_url},
        )
