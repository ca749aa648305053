from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class EventPayload:
    """
    One activity record as it travels on the event stream.

    Consumers rebuild the activity feed from these, so the payload carries
    the record's target and wording rather than a free-form blob.
    """

    def __init__(self, event_type: str, actor_id: Optional[int], target_type: str,
                 target_id: int, details: str = "", metadata: Dict[str, Any] = None,
                 activity_id: Optional[int] = None, timestamp: datetime = None):
        self.event_type = event_type
        self.actor_id = actor_id
        self.target_type = target_type
        self.target_id = target_id
        self.details = details
        self.metadata = metadata or {}
        self.activity_id = activity_id
        self.timestamp = timestamp or datetime.now(timezone.utc)

    @classmethod
    def from_activity(cls, activity) -> "EventPayload":
        return cls(
            event_type=activity.action,
            actor_id=activity.user_id,
            target_type=activity.target_type,
            target_id=activity.target_id,
            details=activity.details,
            metadata=activity.metadata,
            activity_id=activity.pk,
            timestamp=activity.created_at,
        )

    @property
    def partition_key(self) -> str:
        # Events about one target share a partition and stay in order
        return f"{self.target_type}:{self.target_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_type': self.event_type,
            'activity_id': self.activity_id,
            'actor_id': self.actor_id,
            'target_type': self.target_type,
            'target_id': self.target_id,
            'details': self.details,
            'metadata': self.metadata,
            'timestamp': self.timestamp.isoformat(),
        }


class EventPublisher(ABC):
    """Destination for activity events"""

    @abstractmethod
    def publish(self, topic: str, event: EventPayload) -> bool:
        """
        Publish an event, keyed by its target

        Returns:
            bool: True if published successfully
        """

    def close(self):
        """Release the connection, if any"""


class EventPublisherFactory:
    """Factory for the configured event publisher"""

    _publisher = None

    @classmethod
    def get_publisher(cls) -> EventPublisher:
        if cls._publisher is None:
            from django.conf import settings

            publisher_type = getattr(settings, 'EVENT_PUBLISHER_TYPE', 'kafka')

            if publisher_type == 'kafka':
                from .kafka_publisher import KafkaEventPublisher
                cls._publisher = KafkaEventPublisher()
            elif publisher_type == 'memory':
                from .memory_publisher import MemoryEventPublisher
                cls._publisher = MemoryEventPublisher()
            else:
                raise ValueError(f"Unknown event publisher type: {publisher_type}")

        return cls._publisher

    @classmethod
    def reset_publisher(cls):
        if cls._publisher:
            cls._publisher.close()
            cls._publisher = None
