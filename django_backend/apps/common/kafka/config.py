import json
import logging
import time

from django.conf import settings
from kafka import KafkaProducer

logger = logging.getLogger(__name__)


def activity_topic():
    return getattr(settings, "KAFKA_ACTIVITY_TOPIC", "activity-events")


class KafkaConnection:
    """
    Shared producer for the activity stream.

    Activity is written on every board change, so a dead broker must not
    cost a connect attempt per record: after a failure no new producer is
    built until ``KAFKA_RETRY_SECONDS`` have passed.
    """

    _producer = None
    _down_since = None

    @classmethod
    def get_producer(cls):
        if cls._producer is not None:
            return cls._producer
        if cls._down_since is not None and time.monotonic() - cls._down_since < cls.retry_seconds():
            return None

        try:
            cls._producer = KafkaProducer(
                bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS.split(","),
                client_id="taskboard-activity",
                value_serializer=lambda x: json.dumps(x, default=str).encode("utf-8"),
                key_serializer=lambda x: x.encode("utf-8"),
                retries=3,
                retry_backoff_ms=300,
                request_timeout_ms=30000,
                acks="all",
            )
        except Exception as e:
            logger.error(f"Failed to initialize Kafka producer: {e}")
            cls.mark_unavailable()
            return None

        cls._down_since = None
        logger.info("Kafka producer initialized for %s", settings.KAFKA_BOOTSTRAP_SERVERS)
        return cls._producer

    @classmethod
    def mark_unavailable(cls):
        """Drop the current producer and back off before reconnecting."""
        cls._down_since = time.monotonic()
        producer, cls._producer = cls._producer, None
        if producer is not None:
            try:
                producer.close(timeout=0)
            except Exception:
                logger.debug("Error closing failed Kafka producer", exc_info=True)

    @classmethod
    def close_producer(cls):
        producer, cls._producer = cls._producer, None
        cls._down_since = None
        if producer is not None:
            producer.close()

    @staticmethod
    def retry_seconds():
        return getattr(settings, "KAFKA_RETRY_SECONDS", 30)

    @staticmethod
    def flush_timeout():
        return getattr(settings, "KAFKA_FLUSH_TIMEOUT", 5)
