from unittest.mock import patch
from pool_deriver.core.event_slot import InMemoryEventSlot, MongoEventSlot


def test_in_memory_slot_starts_empty():
    """Test that a new slot has no pending event"""
    slot = InMemoryEventSlot()
    assert slot.peek() is None
    assert slot.take() is None


def test_in_memory_take_consumes_once(attach_event):
    """Test that take returns the event exactly once"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)

    assert slot.peek() == attach_event
    assert slot.peek() == attach_event
    assert slot.take() == attach_event
    assert slot.take() is None
    assert slot.peek() is None


def test_in_memory_put_replaces_pending(attach_event):
    """Test that only the latest event is kept"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)
    replacement = attach_event.model_copy(update={"server_uuid": "u10"})
    slot.put(replacement)
    assert slot.take().server_uuid == "u10"


def test_mongo_slot_delegates_to_collections(attach_event):
    """Test that the persisted slot uses the atomic database operations"""
    with patch('pool_deriver.core.event_slot.db') as mock_db:
        mock_db.take_pending_event.return_value = attach_event
        slot = MongoEventSlot()

        slot.put(attach_event)
        mock_db.put_pending_event.assert_called_once_with(attach_event)

        slot.peek()
        mock_db.peek_pending_event.assert_called_once()

        assert slot.take() == attach_event
        mock_db.take_pending_event.assert_called_once()
