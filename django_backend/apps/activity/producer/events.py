import logging

from apps.common.events import EventPayload, EventPublisherFactory
from apps.common.kafka.config import activity_topic

logger = logging.getLogger(__name__)


def publish_activity_event(activity) -> bool:
    """
    Forward a stored activity record to the event stream

    The record is already committed, so a publishing failure is logged and
    reported through the return value only.
    """
    try:
        publisher = EventPublisherFactory.get_publisher()
        success = publisher.publish(activity_topic(), EventPayload.from_activity(activity))
    except Exception as e:
        logger.error(f"Error publishing activity event {activity.action}: {e}")
        return False

    if not success:
        logger.error(f"Failed to publish activity event: {activity.action}")
    return success
