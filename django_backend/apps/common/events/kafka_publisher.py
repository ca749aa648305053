import logging

from apps.common.kafka.config import KafkaConnection
from .base import EventPublisher, EventPayload

logger = logging.getLogger(__name__)


class KafkaEventPublisher(EventPublisher):
    """Sends activity events to Kafka, one partition per activity target"""

    def publish(self, topic: str, event: EventPayload) -> bool:
        producer = KafkaConnection.get_producer()
        if producer is None:
            logger.error(f"Kafka producer unavailable, dropping {event.event_type} event")
            return False

        try:
            producer.send(topic=topic, value=event.to_dict(), key=event.partition_key)
            producer.flush(timeout=KafkaConnection.flush_timeout())
        except Exception as e:
            logger.error(f"Failed to publish {event.event_type} to {topic}: {e}")
            KafkaConnection.mark_unavailable()
            return False

        logger.debug(f"Published {event.event_type} for {event.partition_key} to {topic}")
        return True

    def close(self):
        try:
            KafkaConnection.close_producer()
        except Exception as e:
            logger.error(f"Error closing Kafka connection: {e}")
