import logging
from typing import Dict, List

from .base import EventPublisher, EventPayload

logger = logging.getLogger(__name__)


class MemoryEventPublisher(EventPublisher):
    """Keeps published events per topic, for tests and local runs"""

    def __init__(self):
        self.events: Dict[str, List[Dict]] = {}

    def publish(self, topic: str, event: EventPayload) -> bool:
        self.events.setdefault(topic, []).append({**event.to_dict(), 'key': event.partition_key})
        logger.debug(f"Stored {event.event_type} for {event.partition_key} on {topic}")
        return True

    def get_events(self, topic: str) -> List[Dict]:
        return self.events.get(topic, [])

    def clear_events(self, topic: str = None):
        if topic:
            self.events.pop(topic, None)
        else:
            self.events.clear()
