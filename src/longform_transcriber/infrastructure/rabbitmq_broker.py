"""RabbitMQ implementation of the MessageBroker interface."""

import json
import logging
from collections.abc import Callable
from typing import Any

import pika
from pika.adapters.blocking_connection import BlockingChannel

from longform_transcriber.config import RabbitMQConfig
from longform_transcriber.exceptions import EventPublishError

from .interfaces import MessageBroker

logger = logging.getLogger(__name__)

# Completion events survive a broker restart.
_EVENT_PROPERTIES = pika.BasicProperties(
    content_type="application/json",
    delivery_mode=pika.DeliveryMode.Persistent,
)


class RabbitMQBroker(MessageBroker):
    """
    Consumes transcription requests and publishes completion events.

    Requests are taken one at a time. A rejected request is not requeued;
    the queue dead-letters it to ``dlq_name``.
    """

    def __init__(self, channel: BlockingChannel, config: RabbitMQConfig):
        self._channel = channel
        self._config = config
        self._queue = config.queue_config

    def publish(self, routing_key: str, payload: dict) -> None:
        try:
            self._channel.basic_publish(
                exchange=self._config.exchange_name,
                routing_key=routing_key,
                body=json.dumps(payload),
                properties=_EVENT_PROPERTIES,
            )
        except Exception as e:
            logger.exception(
                "Event publish failed",
                extra={"routing_key": routing_key},
            )
            raise EventPublishError(routing_key, e) from e

        logger.info(
            "Event published",
            extra={"exchange": self._config.exchange_name, "routing_key": routing_key},
        )

    def acknowledge(self, delivery_tag: int) -> None:
        self._channel.basic_ack(delivery_tag=delivery_tag)

    def reject(self, delivery_tag: int) -> None:
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=False)

    def consume(
        self, callback: Callable[[bytes, int, dict[str, Any] | None], None]
    ) -> None:
        def on_message(ch, method, properties, body):
            headers = properties.headers if properties else None
            callback(body, method.delivery_tag, headers)

        self._channel.basic_qos(prefetch_count=1)
        self._channel.basic_consume(
            queue=self._queue.name, on_message_callback=on_message
        )
        logger.info("Waiting for transcription requests", extra={"queue": self._queue.name})
        self._channel.start_consuming()

    def stop(self) -> None:
        self._channel.stop_consuming()
        logger.info("Stopped consuming", extra={"queue": self._queue.name})

    def setup(self) -> None:
        """Declares the dead-letter route, the events exchange and the request queue."""
        self._declare_dead_letter_route()
        self._channel.exchange_declare(
            exchange=self._config.exchange_name, exchange_type="topic", durable=True
        )
        self._declare_request_queue()
        logger.info(
            "Queue topology declared",
            extra={"queue": self._queue.name, "dlq": self._queue.dlq_name},
        )

    def _declare_dead_letter_route(self) -> None:
        self._channel.exchange_declare(
            exchange=self._queue.dlq_exchange_name,
            exchange_type="direct",
            durable=True,
        )
        self._channel.queue_declare(queue=self._queue.dlq_name, durable=True)
        self._channel.queue_bind(
            queue=self._queue.dlq_name,
            exchange=self._queue.dlq_exchange_name,
            routing_key=self._queue.dlq_routing_key,
        )

    def _declare_request_queue(self) -> None:
        self._channel.queue_declare(
            queue=self._queue.name,
            durable=True,
            arguments={
                "x-queue-type": self._queue.queue_type,
                "x-delivery-limit": self._queue.max_delivery_count,
                "x-dead-letter-exchange": self._queue.dlq_exchange_name,
                "x-dead-letter-routing-key": self._queue.dlq_routing_key,
            },
        )
        self._channel.queue_bind(
            queue=self._queue.name,
            exchange=self._config.exchange_name,
            routing_key=self._queue.expected_routing_key,
        )
