import json
from types import SimpleNamespace
from unittest.mock import ANY, Mock

import pika
import pytest

from longform_transcriber.config import RabbitMQConfig
from longform_transcriber.exceptions import EventPublishError
from longform_transcriber.infrastructure.rabbitmq_broker import RabbitMQBroker

CONFIG = RabbitMQConfig(host="localhost", user="guest", password="guest")


def test_publish_sends_json_to_the_events_exchange():
    channel = Mock()

    RabbitMQBroker(channel, CONFIG).publish("transcription.completed", {"task_id": "t-1"})

    channel.basic_publish.assert_called_once_with(
        exchange="events",
        routing_key="transcription.completed",
        body=json.dumps({"task_id": "t-1"}),
        properties=ANY,
    )


def test_publish_failure_raises_event_publish_error():
    channel = Mock()
    channel.basic_publish.side_effect = ConnectionError("channel closed")

    with pytest.raises(EventPublishError) as excinfo:
        RabbitMQBroker(channel, CONFIG).publish("transcription.completed", {})

    assert excinfo.value.routing_key == "transcription.completed"


def test_reject_dead_letters_without_requeue():
    channel = Mock()

    RabbitMQBroker(channel, CONFIG).reject(7)

    channel.basic_nack.assert_called_once_with(delivery_tag=7, requeue=False)


def test_consume_takes_one_message_at_a_time_and_passes_headers():
    channel = Mock()
    received = []
    broker = RabbitMQBroker(channel, CONFIG)

    broker.consume(lambda body, tag, headers: received.append((body, tag, headers)))

    channel.basic_qos.assert_called_once_with(prefetch_count=1)
    on_message = channel.basic_consume.call_args.kwargs["on_message_callback"]
    on_message(
        channel,
        SimpleNamespace(delivery_tag=3),
        SimpleNamespace(headers={"x-delivery-count": 2}),
        b"{}",
    )
    assert received == [(b"{}", 3, {"x-delivery-count": 2})]
    channel.start_consuming.assert_called_once()


def test_stop_stops_consuming():
    channel = Mock()

    RabbitMQBroker(channel, CONFIG).stop()

    channel.stop_consuming.assert_called_once()


def test_setup_declares_a_quorum_queue_with_dead_lettering():
    channel = Mock()

    RabbitMQBroker(channel, CONFIG).setup()

    channel.queue_declare.assert_any_call(
        queue="transcription_request_queue",
        durable=True,
        arguments={
            "x-queue-type": "quorum",
            "x-delivery-limit": 3,
            "x-dead-letter-exchange": "dead_letter_exchange",
            "x-dead-letter-routing-key": "transcription.failed",
        },
    )
    channel.queue_bind.assert_any_call(
        queue="transcription_request_queue",
        exchange="events",
        routing_key="transcription.requested",
    )


def test_completion_events_are_persistent_json():
    channel = Mock()

    RabbitMQBroker(channel, CONFIG).publish("transcription.completed", {"task_id": "t-1"})

    properties = channel.basic_publish.call_args.kwargs["properties"]
    assert properties.content_type == "application/json"
    assert properties.delivery_mode in (2, pika.DeliveryMode.Persistent)


def test_dead_letter_queue_exists_before_the_request_queue():
    channel = Mock()

    RabbitMQBroker(channel, CONFIG).setup()

    declared = [c.kwargs["queue"] for c in channel.queue_declare.call_args_list]
    assert declared == ["dlq_transcription_requests", "transcription_request_queue"]
