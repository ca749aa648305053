import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from django.db import DatabaseError, transaction

from .models import Activity

logger = logging.getLogger(__name__)


class AuditWriteFailure(Exception):
    """Raised by a sink when an activity record could not be stored."""


class ActivityEntry:
    """An activity record waiting to be written to a sink"""

    def __init__(self, actor_id: Optional[int], action: str, target_type: str, target_id: int,
                 details: str = "", metadata: Dict[str, Any] = None):
        self.actor_id = actor_id
        self.action = action
        self.target_type = target_type
        self.target_id = target_id
        self.details = details
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actor_id": self.actor_id,
            "action": self.action,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "details": self.details,
            "metadata": self.metadata,
        }

    def __repr__(self):
        return f"ActivityEntry({self.action!r}, {self.target_type}={self.target_id})"


class AuditSink(ABC):
    """Append-only destination for activity records"""

    @abstractmethod
    def write(self, entry: ActivityEntry) -> None:
        """
        Store one activity record.

        Raises:
            AuditWriteFailure: the record could not be stored
        """
        pass


class DatabaseAuditSink(AuditSink):
    """Stores records as Activity rows and forwards them to the event stream"""

    def write(self, entry: ActivityEntry) -> None:
        try:
            # Savepoint so a failed insert doesn't poison an enclosing transaction
            with transaction.atomic():
                activity = Activity.objects.create(
                    user_id=entry.actor_id,
                    action=entry.action,
                    target_type=entry.target_type,
                    target_id=entry.target_id,
                    details=entry.details,
                    metadata=entry.metadata,
                )
        except DatabaseError as exc:
            raise AuditWriteFailure(f"Could not store {entry!r}") from exc

        from .producer import publish_activity_event
        publish_activity_event(activity)


class MemoryAuditSink(AuditSink):
    """In-memory sink for tests and local runs"""

    def __init__(self):
        self.entries: List[ActivityEntry] = []

    def write(self, entry: ActivityEntry) -> None:
        self.entries.append(entry)

    def actions(self) -> List[str]:
        return [e.action for e in self.entries]

    def clear(self):
        self.entries.clear()


class AuditSinkFactory:
    """Factory for the configured audit sink"""

    _sink = None

    @classmethod
    def get_sink(cls) -> AuditSink:
        if cls._sink is None:
            from django.conf import settings

            sink_type = getattr(settings, "AUDIT_SINK_TYPE", "database")

            if sink_type == "database":
                cls._sink = DatabaseAuditSink()
            elif sink_type == "memory":
                cls._sink = MemoryAuditSink()
            else:
                raise ValueError(f"Unknown audit sink type: {sink_type}")

        return cls._sink

    @classmethod
    def reset_sink(cls):
        """Reset sink (useful for testing)"""
        cls._sink = None
