from .events import publish_activity_event

__all__ = ["publish_activity_event"]
