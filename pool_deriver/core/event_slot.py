import threading
from abc import ABC, abstractmethod
from typing import Optional
from pool_deriver.db import collections as db
from pool_deriver.db.models import AttachDetachEvent

class EventSlot(ABC):
    """Holds at most one pending attach/detach event between configuration runs."""

    @abstractmethod
    def put(self, event: AttachDetachEvent) -> None:
        """Store an event, replacing any event not yet consumed."""
        pass

    @abstractmethod
    def peek(self) -> Optional[AttachDetachEvent]:
        pass

    @abstractmethod
    def take(self) -> Optional[AttachDetachEvent]:
        """Return the pending event and clear the slot as one step."""
        pass

class InMemoryEventSlot(EventSlot):
    def __init__(self):
        self._event: Optional[AttachDetachEvent] = None
        self._lock = threading.Lock()

    def put(self, event: AttachDetachEvent) -> None:
        with self._lock:
            self._event = event

    def peek(self) -> Optional[AttachDetachEvent]:
        with self._lock:
            return self._event

    def take(self) -> Optional[AttachDetachEvent]:
        with self._lock:
            event, self._event = self._event, None
            return event

class MongoEventSlot(EventSlot):
    """Event slot persisted in the inventory database so it survives process restarts."""

    def put(self, event: AttachDetachEvent) -> None:
        db.put_pending_event(event)

    def peek(self) -> Optional[AttachDetachEvent]:
        return db.peek_pending_event()

    def take(self) -> Optional[AttachDetachEvent]:
        return db.take_pending_event()
