import pytest
from unittest.mock import patch
from pool_deriver.core.errors import MissingFieldError, EmptyPoolListError
from pool_deriver.core.event_slot import InMemoryEventSlot
from pool_deriver.core.run import ConfigurationRun
from pool_deriver.db.models import AttachDetachEvent
from pool_deriver.utils.config import DeriverSettings


@pytest.fixture
def db_mock(mock_servers):
    """Mock the database module for the configuration run"""
    with patch('pool_deriver.core.run.db') as mock_db:
        mock_db.get_all_servers.return_value = mock_servers
        yield mock_db


def test_execute_consumes_event(db_mock, settings, attach_event):
    """Test that a run merges the pending event and clears the slot"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)

    attributes = ConfigurationRun(slot, settings).execute()

    assert "u9 10.0.0.9:8000" in [key for server in attributes["backend"]["web"]["server"] for key in server]
    assert slot.peek() is None
    db_mock.get_all_servers.assert_called_once()


def test_second_run_does_not_reapply_event(db_mock, settings, attach_event):
    """Test that an event is applied by one run only"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)
    run = ConfigurationRun(slot, settings)

    first = run.execute()
    second = run.execute()

    assert len(first["backend"]["web"]["server"]) == 3
    assert len(second["backend"]["web"]["server"]) == 2


def test_preview_keeps_event(db_mock, settings, attach_event):
    """Test that a preview leaves the pending event for the next run"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)

    attributes = ConfigurationRun(slot, settings).preview()

    assert len(attributes["backend"]["web"]["server"]) == 3
    assert slot.peek() == attach_event


def test_invalid_event_propagates(db_mock, settings):
    """Test that a malformed event aborts the run and is not retried"""
    slot = InMemoryEventSlot()
    slot.put(AttachDetachEvent(action="attach", pool_name="web"))
    run = ConfigurationRun(slot, settings)

    with pytest.raises(MissingFieldError):
        run.execute()
    assert slot.peek() is None


def test_inventory_unavailable(settings):
    """Test that database errors surface to the caller"""
    with patch('pool_deriver.core.run.db') as mock_db:
        mock_db.get_all_servers.side_effect = ConnectionError("Database connection not available")
        with pytest.raises(ConnectionError):
            ConfigurationRun(InMemoryEventSlot(), settings).execute()


def test_settings_loaded_from_config(db_mock):
    """Test that a run without explicit settings reads the haproxy config section"""
    with patch('pool_deriver.utils.config.CONFIG', {'haproxy': {'pools': ['web'], 'http_chk': True}}):
        run = ConfigurationRun(InMemoryEventSlot())
    assert run.settings.pools == ['web']
    assert run.settings.http_health_check_enabled is True


def test_valid_event_survives_failed_run(db_mock, attach_event):
    """Test that a run failing on configuration leaves the pending event for the next run"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)

    with pytest.raises(EmptyPoolListError):
        ConfigurationRun(slot, DeriverSettings(pools=[])).execute()

    assert slot.peek() == attach_event


def test_event_applied_after_configuration_fixed(db_mock, settings, attach_event):
    """Test that the returned event is merged by the next successful run"""
    slot = InMemoryEventSlot()
    slot.put(attach_event)

    with pytest.raises(EmptyPoolListError):
        ConfigurationRun(slot, DeriverSettings(pools=[])).execute()
    attributes = ConfigurationRun(slot, settings).execute()

    assert len(attributes["backend"]["web"]["server"]) == 3
    assert slot.peek() is None
